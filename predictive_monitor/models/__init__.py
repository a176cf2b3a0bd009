"""
Predictive Monitor Models Module.

Contains:
    - RiskFusionEngine: Two-hypothesis naive-Bayes risk posterior
    - RiskModelConfig / ChannelLikelihood: Risk model configuration

Usage:
    >>> from predictive_monitor.models import RiskFusionEngine
    >>> engine = RiskFusionEngine()
    >>> risk = engine.calculate_risk(hr, map_)
"""

from .fusion import (
    RiskFusionEngine,
    RiskModelConfig,
    ChannelLikelihood,
    AdverseDirection,
)

__all__ = [
    "RiskFusionEngine",
    "RiskModelConfig",
    "ChannelLikelihood",
    "AdverseDirection",
]
