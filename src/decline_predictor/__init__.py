"""Weekly Decline Predictor - heuristic weekly decline estimates for stocks."""

__version__ = "0.1.0"
