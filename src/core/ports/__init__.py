# -*- coding: utf-8 -*-
"""
Ports Interfaces Package

Defines the interfaces between the filter kernels and the host layer.

Design Principles:
- Use Protocol to define interfaces, supporting structural subtyping.
- The host layer depends on these interfaces rather than concrete kernels.
- Facilitates replacing with fake/mock during testing.
"""

from core.ports.dsp import IFilterKernel, IFilterParameters

__all__ = [
    "IFilterKernel",
    "IFilterParameters",
]
