"""Audiogen clients: async wrappers for unofficial AI audio services.

WHY: Suno (song generation) and FakeYou (text-to-speech and voice
conversion) have no public SDKs. Their web apps talk to undocumented JSON
APIs with session-based auth and asynchronous jobs. This package gives
both a small, typed, async Python interface.

HOW: Two independent client packages (suno, fakeyou) built on a shared
core (errors, HTTP transport). Each client owns its credential, renews or
attaches it per call, and offers "wait for completion" polling helpers.

RULES:
- One client instance = one session; clients share no state
- All remote failures surface as subclasses of core.errors.AudiogenError
- Nothing is written to disk; generated audio is returned as URLs or bytes
"""

__version__ = "0.1.0"
