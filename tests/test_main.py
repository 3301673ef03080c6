import sys
import os
import io
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotbox.__main__
import ballotbox.persist
import ballotbox.io.transcript

DATA_DIR = os.path.join(os.path.dirname(__file__), 'io', 'data')


def open_scenario():
    return open(os.path.join(DATA_DIR, 'delegation.jsonl'), encoding='utf8')


def test_replay_scenario(capsys):
    with open_scenario() as infile:
        exit_code = ballotbox.__main__.main(infile, quiet=True)
    out = capsys.readouterr().out
    assert exit_code == 0
    assert 'Election status: ended' in out
    assert '2 candidates, 3 voters, 2 votes cast' in out
    assert 'Winner: A (1) with 1 votes' in out


def test_snapshot_written(capsys):
    snapshot = io.StringIO()
    with open_scenario() as infile:
        ballotbox.__main__.main(infile, snapshot=snapshot, quiet=True)
    engine = ballotbox.persist.from_dict(json.loads(snapshot.getvalue()))
    assert engine.show_election_winner() == ('A', 1, 1)


@pytest.mark.parametrize(('keep_going', 'exit_code', 'n_lines'), [
    (False, 1, 2),
    (True, 0, 3),
])
def test_rejection(capsys, keep_going, exit_code, n_lines):
    text = '\n'.join([
        '{"administrator": "admin"}',
        '{"caller": "admin", "op": "addVoter", "args": ["v1"]}',
        '{"caller": "v1", "op": "addVoter", "args": ["v2"]}',
        '{"op": "getTotalVoters"}',
    ])
    result = ballotbox.__main__.main(
        io.StringIO(text), keep_going=keep_going, quiet=True
    )
    out = capsys.readouterr().out
    assert result == exit_code
    assert 'REJECTED Unauthorized' in out
    assert len(out.split('\n\n')[0].splitlines()) == n_lines


def test_unknown_candidate_flag(capsys):
    text = '\n'.join([
        '{"caller": "admin", "op": "addCandidate", "args": ["A", "a"]}',
        '{"caller": "admin", "op": "addVoter", "args": ["v1"]}',
        '{"caller": "admin", "op": "startElection"}',
        '{"caller": "v1", "op": "castVote", "args": [4]}',
    ])
    result = ballotbox.__main__.main(
        io.StringIO(text), administrator='admin',
        reject_unknown_candidates=True, quiet=True,
    )
    assert result == 1
    assert 'REJECTED InvalidCandidate' in capsys.readouterr().out


def test_unknown_candidate_bucket_shown(capsys):
    text = '\n'.join([
        '{"administrator": "admin"}',
        '{"caller": "admin", "op": "addVoter", "args": ["v1"]}',
        '{"caller": "admin", "op": "startElection"}',
        '{"caller": "v1", "op": "castVote", "args": [4]}',
        '{"caller": "admin", "op": "endElection"}',
    ])
    assert ballotbox.__main__.main(io.StringIO(text), quiet=True) == 0
    out = capsys.readouterr().out
    assert 'unregistered candidate 4: 1' in out
    assert 'Nobody elected' in out


def test_empty_transcript():
    with pytest.warns(UserWarning):
        assert ballotbox.__main__.main(io.StringIO('# nothing\n')) == 0


def test_unhashable_argument_reported(capsys):
    text = '\n'.join([
        '{"administrator": "admin"}',
        '{"caller": "admin", "op": "addVoter", "args": ["v1"]}',
        '{"caller": "admin", "op": "startElection"}',
        '{"caller": "v1", "op": "castVote", "args": [[1]]}',
    ])
    with pytest.raises(ballotbox.io.transcript.TranscriptParseError) as excinfo:
        ballotbox.__main__.main(io.StringIO(text), keep_going=True, quiet=True)
    assert excinfo.value.line_no == 4


@pytest.mark.parametrize(('text', 'message'), [
    ('{"caller": "a", "op": "startElection"}\n',
     'transcript does not name an administrator'),
    ('{"administrator": "a"}\n{"op": "launch_missiles"}\n',
     'line 2: unknown operation'),
])
def test_run_reports_bad_transcript(tmp_path, monkeypatch, capsys, text, message):
    path = tmp_path / 'calls.jsonl'
    path.write_text(text, encoding='utf8')
    monkeypatch.setattr(sys, 'argv', ['ballotbox', '-q', '-i', str(path)])
    with pytest.raises(SystemExit) as excinfo:
        ballotbox.__main__.run()
    assert excinfo.value.code == 2
    assert message in capsys.readouterr().err
