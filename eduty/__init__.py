"""EDuty staff roster scheduling API."""

__version__ = "1.0.0"
