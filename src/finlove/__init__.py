"""FinLove - couples' personal finance tracker."""

__version__ = "0.3.0"


# Import main lazily to avoid circular dependencies
def __getattr__(name):
    if name == "main":
        from finlove.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
