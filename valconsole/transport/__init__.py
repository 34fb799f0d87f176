"""Transport contract for the validator control channel."""

from valconsole.transport.channel import Channel, load_object, open_channel

__all__ = ["Channel", "load_object", "open_channel"]
