"""Ballotbox - an engine for running a single election with delegation.

The :class:`ElectionEngine` from the ``engine`` module holds candidates and
voters of one election and drives it through its phases: registration while
not started, voting while ongoing, and results once ended. Each registered
voter either votes directly or delegates their vote to another voter, who
then casts it on their behalf; delegation goes a single hop only.

Rejected operations raise one of the exceptions from the ``errors`` module
and change nothing. Engine state can be turned into JSON-ready dictionaries
and back by the ``persist`` module, and sequences of calls can be recorded
and replayed by the ``io.transcript`` module and the command line tool
(``python -m ballotbox``).
"""

from ballotbox.engine import ElectionEngine, ElectionPhase    # noqa: F401
