# mini_truss/config.py
"""
Solver configuration and defaults.
"""

from dataclasses import dataclass


@dataclass
class SolverConfig:
    """Global solver configuration."""

    # Reduced systems above this condition number are treated as singular
    cond_limit: float = 1e12

    # Bars shorter than this are rejected as degenerate
    min_length: float = 0.0

    # Absolute tolerance for force/moment balance checks in post-processing
    equilibrium_atol: float = 1e-6


# Global config instance
CONFIG = SolverConfig()
