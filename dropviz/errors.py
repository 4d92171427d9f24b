"""Exception types raised at the edges of the pipeline.

Stage code (window, transform, reduction, smoothing) does not raise these;
all fallibility lives in configuration and audio I/O.
"""


class DropvizError(Exception):
    """Base class for everything dropviz raises on purpose."""


class ConfigurationError(DropvizError):
    """Invalid engine or playback parameters. Fatal at start-up."""


class SourceIOError(DropvizError):
    """Decoder or file read failure other than end of stream."""


class SinkIOError(DropvizError):
    """Playback device failure."""


class EndOfStream(DropvizError):
    """The current track has no more audio. Not a failure."""


class UnsupportedFileType(DropvizError):
    """A file without a recognised audio extension was offered."""

    def __init__(self, path):
        super().__init__(f"Bad file type: {path}")
        self.path = path
