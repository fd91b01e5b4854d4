"""PrintCost Studio: 3D print cost estimation from G-code files."""

__version__ = "1.0.0"
