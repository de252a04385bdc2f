"""Protocol layer: command lines, response parsing, decoders, file framing."""

from .commands import Command, build_command
from .framing import FileFrame, iter_frames, parse_frame
from .parser import ResponseReader
