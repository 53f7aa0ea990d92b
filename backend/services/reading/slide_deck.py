"""
Presentation slide list.

SlidePresenter is the interface the quiz scheduler mutates; SlideDeck is the
in-memory implementation used by reading sessions.
"""
from typing import List, Optional, Protocol, Sequence

from models.reading_models import Slide


class SlidePresenter(Protocol):
    """Receives slide list mutations."""

    def set_slides(self, slides: Sequence[Slide]) -> None:
        ...

    def insert_slide(self, slide: Slide, position: int) -> None:
        """Insert at position; slides at or after it move down by one."""
        ...

    def replace_slide(self, slide_id: str, slide: Slide) -> bool:
        """Swap a slide in place; False when slide_id is no longer present."""
        ...


class SlideDeck:
    """Ordered in-memory slide list."""

    def __init__(self):
        self._slides: List[Slide] = []

    def set_slides(self, slides: Sequence[Slide]) -> None:
        self._slides = list(slides)

    def insert_slide(self, slide: Slide, position: int) -> None:
        # Positions past the end append
        position = max(0, min(position, len(self._slides)))
        self._slides.insert(position, slide)

    def replace_slide(self, slide_id: str, slide: Slide) -> bool:
        position = self.index_of(slide_id)
        if position is None:
            return False
        self._slides[position] = slide
        return True

    def index_of(self, slide_id: str) -> Optional[int]:
        for position, slide in enumerate(self._slides):
            if slide.slide_id == slide_id:
                return position
        return None

    def get(self, position: int) -> Optional[Slide]:
        if 0 <= position < len(self._slides):
            return self._slides[position]
        return None

    @property
    def slides(self) -> List[Slide]:
        return list(self._slides)

    def __len__(self) -> int:
        return len(self._slides)
