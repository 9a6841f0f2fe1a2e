"""
Logging Configuration for the Grid Conversion Core.

All modules obtain their logger through :func:`get_logger` so that solver
diagnostics, registry fallbacks and conversion failures share one format.

Log Levels
----------
- DEBUG: solver convergence (iteration count, final residual)
- WARNING: registry fallback to a configured default, failed consistency checks
- ERROR: conversion failures, logged immediately before the exception is raised
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the conversion core.
    
    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.
        
    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    
    logger.setLevel(level)
    return logger

