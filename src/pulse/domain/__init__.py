"""
Domain module initialization.
"""
from .entities import (
    DataStrategy,
    NoiseBand,
    HistoricalPoint,
    NoiseReading,
    NoiseComponents,
    EVAdoptionEstimate
)
from .dataset import HistoricalDataset, load_montreal_dataset, validate_site, SITES
from .protocols import Clock, BaseNoiseSource, ReadingListener
