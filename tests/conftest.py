"""
Pytest fixtures for animforge tests
"""

import pytest

from animforge.scene import CircleElement, Layer, Project, RectElement, Style, Transform
from animforge.store import ProjectStore


class FakeClock:
    """Manually advanced monotonic clock for playback tests."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rect_layer() -> Layer:
    """A red 100x50 rectangle layer at (10, 20)."""
    return Layer(
        id='layer-rect',
        name='Red Rect',
        element=RectElement(
            id='rect-1',
            name='Rect',
            x=10,
            y=20,
            width=100,
            height=50,
            style=Style(fill='#ff0000'),
        ),
    )


@pytest.fixture
def circle_layer() -> Layer:
    return Layer(
        id='layer-circle',
        name='Blue Circle',
        element=CircleElement(
            id='circle-1',
            name='Circle',
            cx=50,
            cy=60,
            r=25,
            transform=Transform(x=5, y=5),
            style=Style(fill='#0000ff', stroke='#000000', strokeWidth=2, opacity=0.5),
        ),
    )


@pytest.fixture
def project(rect_layer: Layer) -> Project:
    """Two second, 30 fps project with one rectangle layer."""
    return Project(name='Test', width=400, height=300, fps=30, duration=2.0, layers=[rect_layer])


@pytest.fixture
def store(project: Project) -> ProjectStore:
    return ProjectStore(project)
