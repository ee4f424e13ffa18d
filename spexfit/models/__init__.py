from spexfit.models.models import GaussianModel, StraightLineModel

__all__ = ["GaussianModel", "StraightLineModel"]
