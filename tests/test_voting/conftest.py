"""Shared fixtures for voting system tests."""

import pytest


@pytest.fixture
def dinner():
    """Four rankings of three dishes.

                 minori  yasushi  ray  sola
    beef steak      1       2      2     3
    kungpao         2       1      3     2
    pork stew       3       3      1     1

    Every dish ends up with 8 Borda points.
    """
    return [
        ["beef steak", "kungpao chicken", "white pork stew"],
        ["kungpao chicken", "beef steak", "white pork stew"],
        ["white pork stew", "beef steak", "kungpao chicken"],
        ["white pork stew", "kungpao chicken", "beef steak"],
    ]


@pytest.fixture
def animal_credits():
    """Three voters spending credits on animals.

    Square roots: dog = 1 + 4 = 5, cat = 1 + 2 = 3, bat = 2 + 3 = 5.
    """
    return [
        {"dog": 1.0, "cat": 1.0, "bat": 4.0},
        {"dog": 16.0},
        {"cat": 4.0, "bat": 9.0},
    ]


@pytest.fixture
def breakfast():
    """Three delegates choosing breakfast, mixing direct votes and delegation.

    minori sends 70% straight to bread; yasushi leans to rice; ray mostly
    delegates. minori receives delegation from both others.
    """
    return {
        "minori": {"yasushi": 0.1, "ray": 0.1, "rice": 0.1, "bread": 0.7},
        "yasushi": {"minori": 0.2, "ray": 0.3, "rice": 0.5},
        "ray": {"minori": 0.4, "yasushi": 0.4, "bread": 0.2},
    }


@pytest.fixture
def funnel():
    """alice and bob both delegate everything to carol, who votes apples."""
    return {
        "alice": {"carol": 1.0},
        "bob": {"carol": 1.0},
        "carol": {"apples": 1.0},
    }
