"""Read, write and replay transcripts of election engine calls.

A transcript is a text file with one JSON object per line. An optional
header line sets up the engine; every other line is a call::

    {"administrator": "admin", "reject_unknown_candidates": false}
    {"caller": "admin", "op": "add_candidate", "args": ["Alice", "Parks"]}
    {"caller": "admin", "op": "add_voter", "args": ["v1"]}
    {"caller": "admin", "op": "startElection"}
    {"caller": "v1", "op": "castVote", "args": [1]}

Blank lines and lines starting with ``#`` are ignored. Operation names are
resolved by :mod:`ballotbox.dispatch`; queries may omit the caller.
"""

import json
import logging
import dataclasses
from typing import Any, List, Dict, Tuple, Iterable, Optional

import ballotbox.dispatch
import ballotbox.io.core
from ballotbox.engine import ElectionEngine
from ballotbox.errors import ElectionError

logger = logging.getLogger(__name__)

HEADER_KEYS = frozenset(['administrator', 'reject_unknown_candidates'])
CALL_KEYS = frozenset(['caller', 'op', 'args'])
# identifiers and arguments must be hashable JSON values
SCALAR_TYPES = (str, int, float, bool, type(None))


class TranscriptParseError(ballotbox.io.core.ParseError):
    pass


@dataclasses.dataclass
class Call:
    """A single request to the engine."""
    op: str
    args: List[Any] = dataclasses.field(default_factory=list)
    caller: Optional[Any] = None


@dataclasses.dataclass
class Transcript:
    """A sequence of calls together with the engine setup, if given."""
    calls: List[Call]
    administrator: Optional[Any] = None
    reject_unknown_candidates: bool = False

    def create_engine(self, administrator: Optional[Any] = None
                      ) -> ElectionEngine:
        """Create a fresh engine as specified by the header.

        :param administrator: Overrides the administrator from the header.
        :raises ValueError: If no administrator is known.
        """
        if administrator is None:
            administrator = self.administrator
        if administrator is None:
            raise ValueError('transcript does not name an administrator')
        return ElectionEngine(
            administrator,
            reject_unknown_candidates=self.reject_unknown_candidates,
        )


@dataclasses.dataclass
class Outcome:
    """The result of replaying a single call."""
    call: Call
    result: Any = None
    error: Optional[ElectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_lines(lines: Iterable[str]) -> Transcript:
    transcript = Transcript(calls=[])
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        record = _parse_record(line, line_no)
        if 'op' in record:
            transcript.calls.append(_parse_call(record, line_no))
        elif transcript.calls or transcript.administrator is not None:
            raise TranscriptParseError('header must precede all calls',
                                       line_no)
        else:
            _apply_header(transcript, record, line_no)
    return transcript


load, loads = ballotbox.io.core.loaders(load_lines)


def _parse_record(line: str, line_no: int) -> Dict[str, Any]:
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise TranscriptParseError(f'invalid JSON: {e.msg}', line_no) from e
    if not isinstance(record, dict):
        raise TranscriptParseError(f'object expected, got {record!r}',
                                   line_no)
    return record


def _parse_call(record: Dict[str, Any], line_no: int) -> Call:
    unknown = set(record.keys()) - CALL_KEYS
    if unknown:
        raise TranscriptParseError(
            'unknown call keys: ' + ', '.join(sorted(unknown)), line_no
        )
    try:
        operation = ballotbox.dispatch.get_operation(record['op'])
    except (ballotbox.dispatch.UnknownOperation, TypeError) as e:
        raise TranscriptParseError(str(e), line_no) from e
    args = record.get('args', [])
    if not isinstance(args, list):
        raise TranscriptParseError(f'args must be a list, got {args!r}',
                                   line_no)
    if len(args) != operation.n_args:
        raise TranscriptParseError(
            f"{record['op']} takes {operation.n_args} arguments,"
            f" got {len(args)}", line_no
        )
    caller = record.get('caller')
    for value in [caller, *args]:
        if not isinstance(value, SCALAR_TYPES):
            raise TranscriptParseError(
                f'scalar value expected, got {value!r}', line_no
            )
    return Call(op=record['op'], args=args, caller=caller)


def _apply_header(transcript: Transcript,
                  record: Dict[str, Any],
                  line_no: int,
                  ) -> None:
    unknown = set(record.keys()) - HEADER_KEYS
    if unknown:
        raise TranscriptParseError(
            'unknown header keys: ' + ', '.join(sorted(unknown)), line_no
        )
    if 'administrator' not in record:
        raise TranscriptParseError('header must name an administrator',
                                   line_no)
    if not isinstance(record['administrator'], SCALAR_TYPES):
        raise TranscriptParseError(
            f"scalar administrator expected, got {record['administrator']!r}",
            line_no
        )
    transcript.administrator = record['administrator']
    transcript.reject_unknown_candidates = bool(
        record.get('reject_unknown_candidates', False)
    )


def dump_lines(transcript: Transcript) -> Iterable[str]:
    if transcript.administrator is not None:
        yield json.dumps({
            'administrator': transcript.administrator,
            'reject_unknown_candidates': transcript.reject_unknown_candidates,
        })
    for call in transcript.calls:
        record = {'caller': call.caller, 'op': call.op}
        if call.args:
            record['args'] = call.args
        yield json.dumps(record)


dump, dumps = ballotbox.io.core.dumpers(dump_lines)


def replay(transcript: Transcript,
           engine: Optional[ElectionEngine] = None,
           keep_going: bool = False,
           ) -> Tuple[ElectionEngine, List[Outcome]]:
    """Run the calls of a transcript against an engine.

    :param transcript: The calls to run.
    :param engine: The engine to run them on. If not given, a new one is
        created from the transcript header.
    :param keep_going: Whether to continue after a call is rejected. If
        False, the replay stops at the first rejected call, which is the
        last outcome returned.
    :returns: The engine and the outcomes of the calls that were run.
    """
    if engine is None:
        engine = transcript.create_engine()
    outcomes = []
    for call in transcript.calls:
        try:
            result = ballotbox.dispatch.dispatch(
                engine, call.caller, call.op, call.args
            )
        except ElectionError as e:
            logger.info('%s by %r rejected: %s', call.op, call.caller, e)
            outcomes.append(Outcome(call, error=e))
            if not keep_going:
                break
        else:
            outcomes.append(Outcome(call, result=result))
    return engine, outcomes
