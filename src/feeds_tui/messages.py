from textual.message import Message

from .datamodels import SourceState


class SourcesChanged(Message):
    """A message carrying a new source-list snapshot."""
    def __init__(self, state: SourceState) -> None:
        self.state = state
        super().__init__()
