from spexfit.fitting.problem import FitSetup, fit_statistic, prepare_fit

__all__ = ["FitSetup", "fit_statistic", "prepare_fit"]
