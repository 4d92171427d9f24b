"""dropviz: drag-and-drop audio spectrum visualiser.

Decodes an audio file, plays it, and draws a bar-graph spectrum with
peak falloff in step with playback.
"""

__version__ = "0.1.0"
