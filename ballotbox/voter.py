'''Voter records kept by the election engine.'''

from typing import Any, Optional, Hashable

from ballotbox.persist import simple_serialization


@simple_serialization
class Voter:
    '''The ballot state of a single voter.

    All flags are set at most once over the lifetime of an election and are
    never unset. Note that delegating does not set :attr:`has_voted` on the
    delegating voter, not even after the delegate exercised the vote; it is
    the delegate whose :attr:`has_voted` becomes true.

    :param voter_id: Opaque caller identifier of the voter.
    :param is_registered: Whether the administrator registered the voter.
    :param has_voted: Whether a vote was recorded as cast by this voter.
    :param vote_delegated: Whether the voter delegated their vote.
    :param delegate_to: Identifier of the delegate; None unless delegated.
    :param voted_candidate_id: Candidate the recorded vote went to; None
        unless the voter has voted.
    '''
    def __init__(self,
                 voter_id: Hashable,
                 is_registered: bool = False,
                 has_voted: bool = False,
                 vote_delegated: bool = False,
                 delegate_to: Optional[Any] = None,
                 voted_candidate_id: Optional[int] = None,
                 ):
        self.voter_id = voter_id
        self.is_registered = is_registered
        self.has_voted = has_voted
        self.vote_delegated = vote_delegated
        self.delegate_to = delegate_to
        self.voted_candidate_id = voted_candidate_id

    def __eq__(self, other) -> bool:
        if not isinstance(other, Voter):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        flags = ''.join([
            'R' if self.is_registered else '-',
            'V' if self.has_voted else '-',
            'D' if self.vote_delegated else '-',
        ])
        return f'<Voter({self.voter_id!r},{flags})>'
