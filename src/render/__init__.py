"""Render module for financial projection output display."""

from render.renderers import (
    BaseRenderer,
    TaxDetailsRenderer,
    OptimizationRenderer,
    RetirementRenderer,
    NetWorthRenderer,
    AmortizationRenderer,
    RENDERER_REGISTRY,
)

__all__ = [
    'BaseRenderer',
    'TaxDetailsRenderer',
    'OptimizationRenderer',
    'RetirementRenderer',
    'NetWorthRenderer',
    'AmortizationRenderer',
    'RENDERER_REGISTRY',
]
