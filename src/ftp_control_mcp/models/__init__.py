"""Data models for recorded session traffic."""

from .traffic import TrafficEntry, TrafficRecorder
