from spexfit.fitting.statistics.gaussian import chi_squared

__all__ = ["chi_squared"]
