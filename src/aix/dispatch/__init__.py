"""Chat generation dispatch: adapters, parsers and the resolver tying them."""

from .chat_generate import ChatGenerateDispatch, WireRequest, create_chat_generate_dispatch
from .transmitter import ParticleBuffer, ParticleTransmitter, coalesce_particles

__all__ = [
    "ChatGenerateDispatch",
    "WireRequest",
    "create_chat_generate_dispatch",
    "ParticleBuffer",
    "ParticleTransmitter",
    "coalesce_particles",
]
