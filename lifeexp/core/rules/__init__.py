"""
Validation rule engine and configuration management.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader, RuleDefinition, default_rules
from .rule_engine import RuleEngine

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "RuleDefinition",
    "default_rules",
]
