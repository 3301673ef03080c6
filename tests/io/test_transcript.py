import sys
import os
import io

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import ballotbox.errors
import ballotbox.io.transcript
from ballotbox.engine import ElectionPhase
from ballotbox.io.transcript import Call, Transcript, TranscriptParseError

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


def test_load_delegation_scenario():
    with open(os.path.join(DATA_DIR, 'delegation.jsonl'), encoding='utf8') as infile:
        transcript = ballotbox.io.transcript.load(infile)
    assert transcript.administrator == 'admin'
    assert not transcript.reject_unknown_candidates
    assert transcript.calls[0] == Call('addCandidate', ['A', 'More parks'], 'admin')
    engine, outcomes = ballotbox.io.transcript.replay(transcript)
    assert all(outcome.ok for outcome in outcomes)
    assert engine.check_election_status() is ElectionPhase.ENDED
    assert engine.show_election_winner() == ('A', 1, 1)
    assert engine.get_voter_details('V2').has_voted
    assert not engine.get_voter_details('V1').has_voted
    assert outcomes[-1].result == ('A', 1, 1)


def test_replay_stops_at_rejection():
    transcript = ballotbox.io.transcript.loads('\n'.join([
        '{"administrator": "admin"}',
        '{"caller": "admin", "op": "add_voter", "args": ["v1"]}',
        '{"caller": "admin", "op": "add_voter", "args": ["v1"]}',
        '{"caller": "admin", "op": "add_voter", "args": ["v2"]}',
    ]))
    engine, outcomes = ballotbox.io.transcript.replay(transcript)
    assert len(outcomes) == 2
    assert outcomes[0].ok
    assert isinstance(outcomes[1].error, ballotbox.errors.AlreadyRegistered)
    assert engine.get_total_voters() == 1


def test_replay_keep_going():
    transcript = ballotbox.io.transcript.loads('\n'.join([
        '{"administrator": "admin"}',
        '{"caller": "mallory", "op": "startElection"}',
        '{"caller": "admin", "op": "startElection"}',
        '{"op": "checkElectionStatus"}',
    ]))
    engine, outcomes = ballotbox.io.transcript.replay(transcript, keep_going=True)
    assert [outcome.ok for outcome in outcomes] == [False, True, True]
    assert isinstance(outcomes[0].error, ballotbox.errors.Unauthorized)
    assert outcomes[2].result is ElectionPhase.ONGOING


def test_comments_and_blank_lines():
    transcript = ballotbox.io.transcript.loads(
        '# setup\n\n{"administrator": "admin", "reject_unknown_candidates": true}\n'
        '   \n{"op": "getTotalVoters"}\n'
    )
    assert transcript.reject_unknown_candidates
    assert transcript.calls == [Call('getTotalVoters', [], None)]
    engine = transcript.create_engine()
    assert engine.reject_unknown_candidates


def test_dumps_loads():
    transcript = Transcript(
        calls=[
            Call('add_candidate', ['A', 'parks'], 'admin'),
            Call('start_election', [], 'admin'),
            Call('show_election_winner'),
        ],
        administrator='admin',
    )
    text = ballotbox.io.transcript.dumps(transcript)
    assert text.splitlines()[1] == (
        '{"caller": "admin", "op": "add_candidate", "args": ["A", "parks"]}'
    )
    assert ballotbox.io.transcript.loads(text) == transcript


def test_dump_to_file():
    transcript = Transcript(calls=[Call('get_total_voters')])
    outfile = io.StringIO()
    ballotbox.io.transcript.dump(outfile, transcript)
    assert outfile.getvalue() == '{"caller": null, "op": "get_total_voters"}\n'


def test_missing_administrator():
    transcript = ballotbox.io.transcript.loads('{"op": "get_total_voters"}')
    with pytest.raises(ValueError):
        transcript.create_engine()
    assert transcript.create_engine('root').administrator == 'root'


@pytest.mark.parametrize(('text', 'line_no'), [
    ('{"op": "add_voter", "args": ["v1"]', 1),
    ('[1, 2]', 1),
    ('{"administrator": "a"}\n{"op": "launch_missiles"}', 2),
    ('{"op": "cast_vote", "args": 1}', 1),
    ('{"op": "cast_vote", "args": [1, 2]}', 1),
    ('{"op": "cast_vote", "args": [1], "weight": 2}', 1),
    ('{"op": ["cast_vote"], "args": [1]}', 1),
    ('{"op": "get_total_voters"}\n{"administrator": "a"}', 2),
    ('{"administrator": "a"}\n{"administrator": "b"}', 2),
    ('{"reject_unknown_candidates": true}', 1),
    ('{"administrator": "a", "quorum": 3}', 1),
    ('{"caller": ["v1"], "op": "castVote", "args": [1]}', 1),
    ('{"administrator": "a"}\n{"caller": "v1", "op": "castVote", "args": [[1]]}', 2),
    ('{"caller": "v1", "op": "delegateVote", "args": [{"id": "v2"}]}', 1),
    ('{"administrator": ["a", "b"]}', 1),
])
def test_parse_errors(text, line_no):
    with pytest.raises(TranscriptParseError) as excinfo:
        ballotbox.io.transcript.loads(text)
    assert excinfo.value.line_no == line_no
    assert str(excinfo.value).startswith(f'line {line_no}: ')


def test_scalar_arguments_accepted():
    transcript = ballotbox.io.transcript.loads(
        '{"caller": 7, "op": "delegateVote", "args": [null]}'
    )
    assert transcript.calls == [Call('delegateVote', [None], 7)]
