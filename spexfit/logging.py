import logging

__all__ = ["get_logger"]

_FORMAT = '%(asctime)s %(levelname)s %(name)s %(lineno)s: %(message)s'


def get_logger(name, level=logging.WARNING):
    """
    Return a configured logger instance.

    Calling this more than once for the same name reconfigures the level but
    does not attach a second handler.

    Parameters
    ----------
    name : `str`
        Name of the logger
    level : `int` or level, optional
        Level of the logger e.g `logging.DEBUG`

    Returns
    -------
    `logging.Logger`
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not any(getattr(h, '_spexfit', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler._spexfit = True
        formatter = logging.Formatter(_FORMAT, datefmt='%Y-%m-%dT%H:%M:%SZ')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    for handler in logger.handlers:
        if getattr(handler, '_spexfit', False):
            handler.setLevel(level)
    return logger
