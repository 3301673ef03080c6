import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import ballotbox.errors
from ballotbox.candidate import Candidate
from ballotbox.engine import ElectionPhase
from ballotbox.voter import Voter


def test_candidate_repr():
    assert repr(Candidate(2, 'Bob', 'roads', 5)) == '<Candidate(2,Bob,5)>'


def test_voter_repr():
    voter = Voter('v1', is_registered=True, vote_delegated=True, delegate_to='v2')
    assert repr(voter) == "<Voter('v1',R-D)>"


def test_records_compare_by_value():
    assert Voter('v1') == Voter('v1')
    assert Voter('v1') != Voter('v1', is_registered=True)
    assert Candidate(1, 'A', 'a') != Candidate(1, 'A', 'a', vote_count=1)


@pytest.mark.parametrize(('error', 'message'), [
    (ballotbox.errors.Unauthorized('eve'),
     "caller 'eve' is not the administrator"),
    (ballotbox.errors.InvalidPhase(ElectionPhase.ENDED, ElectionPhase.ONGOING),
     'invalid election phase: ended, must be ongoing'),
    (ballotbox.errors.InvalidPhase(ElectionPhase.ENDED),
     'invalid election phase: ended'),
    (ballotbox.errors.AlreadyRegistered('v1'),
     "voter 'v1' is already registered"),
    (ballotbox.errors.InvalidDelegate('v1', None),
     "None is not a valid delegate for voter 'v1'"),
    (ballotbox.errors.DelegateAlreadyDelegated('v1', 'v2'),
     "'v2' has delegated their own vote and cannot act as a delegate"
     " for voter 'v1'"),
    (ballotbox.errors.InvalidCandidate(8), 'invalid candidate: 8'),
])
def test_error_messages(error, message):
    assert isinstance(error, ballotbox.errors.ElectionError)
    assert str(error) == message


def test_delegate_errors_are_invalid_delegate():
    for error_class in [
        ballotbox.errors.DelegateNotRegistered,
        ballotbox.errors.DelegateAlreadyVoted,
        ballotbox.errors.DelegateAlreadyDelegated,
    ]:
        assert issubclass(error_class, ballotbox.errors.InvalidDelegate)
