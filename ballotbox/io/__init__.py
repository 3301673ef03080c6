"""Input/output of election engine calls and state.

This subpackage is structured into modules by file format. Currently the
only format is the line-oriented JSON transcript of engine calls
(:mod:`ballotbox.io.transcript`); engine state snapshots are handled by
:mod:`ballotbox.persist`.
"""
