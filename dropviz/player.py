"""Playback state and the per-frame pipeline step.

A Player owns at most one ActiveStream (decoder source + output sink).
Each frame it pulls one block, sends the raw bytes to the sink and the
decoded samples through the SpectrumEngine.
"""

from dropviz.audio_source import FileSource, check_file_type
from dropviz.errors import EndOfStream
from dropviz.sample_format import PCM16, SampleFormat
from dropviz.spectrum_engine import SpectrumEngine


class ActiveStream:
    """The source, sink and sample format for the track being played."""

    def __init__(self, source, sink, sample_format: SampleFormat):
        self.source = source
        self.sink = sink
        self.sample_format = sample_format

    @classmethod
    def open(cls, path, block_size: int, format_name: str,
             sink_factory, source_factory=FileSource):
        """Open `path` and a matching output sink.

        Anything acquired before a failure is released before the error
        propagates.
        """
        source = source_factory(path)
        try:
            sample_format = SampleFormat(format_name, block_size,
                                         source.channels)
            sink = sink_factory(source.sample_rate, source.channels)
            try:
                sink.start()
            except BaseException:
                sink.close()
                raise
        except BaseException:
            source.close()
            raise
        return cls(source, sink, sample_format)

    @property
    def name(self) -> str:
        return self.source.name

    def read_block(self) -> bytes:
        return self.source.read_block(self.sample_format.frames_per_block)

    def close(self):
        """Release the sink, then the source, even if one of them fails."""
        try:
            self.sink.close()
        finally:
            self.source.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class Player:
    """Drives one SpectrumEngine from whichever file is currently loaded."""

    def __init__(self, engine: SpectrumEngine, sink_factory,
                 source_factory=FileSource, sample_format: str = PCM16):
        """
        Args:
            engine:         Spectrum engine fed one block per tick().
            sink_factory:   Called as sink_factory(sample_rate, channels).
            source_factory: Called as source_factory(path).
            sample_format:  Byte-to-sample rule, "pcm16" or "bytes".
        """
        self._engine = engine
        self._sink_factory = sink_factory
        self._source_factory = source_factory
        self._sample_format = sample_format
        self._stream = None
        self.is_playing = False
        self.now_playing = ""

    @property
    def stream(self):
        return self._stream

    def load(self, path) -> str:
        """Stop whatever is playing and start `path`.

        Raises:
            UnsupportedFileType: `path` is not an audio file; the current
                                 track keeps playing.
        """
        check_file_type(path)
        self.close()
        self._stream = ActiveStream.open(
            path,
            self._engine.block_size,
            self._sample_format,
            sink_factory=self._sink_factory,
            source_factory=self._source_factory,
        )
        self._engine.reset()
        self.is_playing = True
        self.now_playing = f"Now Playing: {self._stream.name}"
        print(f"[player] {self.now_playing}")
        return self._stream.name

    def tick(self, max_height: float):
        """Advance playback by one block.

        Returns:
            read-only bar heights, or None when nothing is playing.
            SourceIOError and SinkIOError propagate.
        """
        if not self.is_playing:
            return None

        try:
            data = self._stream.read_block()
        except EndOfStream:
            print(f"[player] Finished {self._stream.name}")
            self.close()
            return None

        samples = self._stream.sample_format.to_samples(data)
        bars = self._engine.process(samples, max_height)
        self._stream.sink.write(data)
        return bars

    def frame_rate(self, fps: int) -> int:
        """Frame cap for the render loop; 0 means uncapped.

        While a track plays, the blocking sink write sets the pace, so the
        loop keeps up with the decoder whatever its sample rate.
        """
        return 0 if self.is_playing else fps

    def close(self):
        """Release the active stream, if any.  Display state is kept."""
        self.is_playing = False
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
