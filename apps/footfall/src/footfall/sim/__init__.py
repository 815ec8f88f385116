"""Scripted kinematic scenarios for driving the tracker headlessly, plus event export."""
