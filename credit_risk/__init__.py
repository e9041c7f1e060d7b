"""Credit-risk scoring engine: model builder, score evaluator and grade resolver."""

__version__ = "1.0.0"
