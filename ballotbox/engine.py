'''The election engine: lifecycle, registration, delegation and tallying.

A single :class:`ElectionEngine` owns all state of one election. Its
operations fall into three groups:

-   Administrative operations (:meth:`ElectionEngine.add_candidate`,
    :meth:`ElectionEngine.add_voter`, :meth:`ElectionEngine.start_election`,
    :meth:`ElectionEngine.end_election`) are reserved to the administrator
    fixed at construction.
-   Voter operations (:meth:`ElectionEngine.delegate_vote`,
    :meth:`ElectionEngine.cast_vote`) are performed by registered voters for
    their own ballot while the election is ongoing.
-   Queries are read-only and available to anyone at any time (except the
    winner, which is only known once the election ended).

The election moves through the phases of :class:`ElectionPhase` strictly
forward. Each mutating operation receives the identifier of its caller as
the first argument; authenticating it is the business of whoever hosts the
engine. Failed operations raise a subclass of
:class:`ballotbox.errors.ElectionError` and leave the state untouched.

Delegation is single-hop and resolved lazily: delegating only records the
target, and the target is checked when the delegating voter casts their
vote. The vote is then recorded as cast by the delegate, so it is the
delegate, not the delegating voter, whose ``has_voted`` flag is set.
'''

import enum
import logging
from typing import Any, List, Tuple, Dict, Hashable, NamedTuple, Optional

import ballotbox.util
import ballotbox.persist
from ballotbox.candidate import Candidate
from ballotbox.voter import Voter
from ballotbox.persist import simple_serialization
from ballotbox.errors import (
    Unauthorized, InvalidPhase, AlreadyRegistered, NotRegistered,
    AlreadyVoted, AlreadyDelegated, InvalidDelegate, DelegateNotRegistered,
    DelegateAlreadyVoted, DelegateAlreadyDelegated, InvalidCandidate,
)

logger = logging.getLogger(__name__)

NOT_VOTED: str = 'Not voted'


class ElectionPhase(enum.Enum):
    '''Lifecycle phase of the election. Transitions only go forward.'''
    NOT_STARTED = 'not_started'
    ONGOING = 'ongoing'
    ENDED = 'ended'

    def __str__(self) -> str:
        return self.value


class CandidateDetails(NamedTuple):
    id: int
    name: str
    proposal: str


class CandidateResult(NamedTuple):
    id: int
    name: str
    vote_count: int


class WinnerResult(NamedTuple):
    name: str
    id: int
    vote_count: int


class VoterDetails(NamedTuple):
    is_registered: bool
    has_voted: bool
    vote_delegated: bool
    delegate_to: Optional[Any]
    voted_candidate_id: Optional[int]


class VoterProfile(NamedTuple):
    candidate_name: str
    voted_candidate_id: Optional[int]
    vote_delegated: bool


NO_WINNER = WinnerResult('', 0, 0)


@simple_serialization
class ElectionEngine:
    '''A single election run by a single administrator.

    :param administrator: Identifier of the only caller allowed to register
        candidates and voters and to start and end the election.
    :param reject_unknown_candidates: If False (the default), a vote for a
        candidate identifier that was never registered is accepted and
        counted in a nameless tally bucket that takes no part in determining
        the winner. If True, such votes are rejected with
        :class:`ballotbox.errors.InvalidCandidate`.
    '''
    serialize_params = [
        'administrator', 'reject_unknown_candidates', 'phase',
        'candidates', 'buckets', 'voters',
    ]

    def __init__(self,
                 administrator: Hashable,
                 reject_unknown_candidates: bool = False,
                 ):
        self._administrator = administrator
        self.reject_unknown_candidates = reject_unknown_candidates
        self._phase = ElectionPhase.NOT_STARTED
        self._candidates: Dict[int, Candidate] = {}
        self._buckets: Dict[int, Candidate] = {}
        self._voters: Dict[Hashable, Voter] = {}

    @property
    def administrator(self) -> Hashable:
        return self._administrator

    @property
    def phase(self) -> ElectionPhase:
        return self._phase

    @property
    def candidates(self) -> List[Candidate]:
        '''Registered candidates in the order of their identifiers.'''
        return list(self._candidates.values())

    @property
    def buckets(self) -> Dict[int, int]:
        '''Votes counted for unregistered candidate identifiers.'''
        return {
            cand_id: bucket.vote_count
            for cand_id, bucket in self._buckets.items()
        }

    @property
    def voters(self) -> List[Voter]:
        '''Voter records in the order of registration.'''
        return list(self._voters.values())

    # administrative operations

    def add_candidate(self, caller: Hashable, name: str, proposal: str
                      ) -> Candidate:
        '''Register a candidate under the next sequential identifier.

        :param caller: Must be the administrator.
        :param name: Name of the candidate.
        :param proposal: What the candidate stands for.
        :returns: The newly registered candidate; identifiers start at 1.
        :raises Unauthorized: If the caller is not the administrator.
        :raises InvalidPhase: If the election has already started.
        '''
        self._check_admin(caller)
        self._check_phase(ElectionPhase.NOT_STARTED)
        cand_id = len(self._candidates) + 1
        candidate = Candidate(cand_id, name, proposal)
        self._candidates[cand_id] = candidate
        logger.info('registered candidate %d: %s', cand_id, name)
        return candidate

    def add_voter(self, caller: Hashable, voter_id: Hashable) -> Voter:
        '''Register a voter.

        :param caller: Must be the administrator.
        :param voter_id: Identifier the voter will call the engine with.
        :returns: The new voter record.
        :raises Unauthorized: If the caller is not the administrator.
        :raises InvalidPhase: If the election has already started.
        :raises AlreadyRegistered: If the voter is registered already; the
            existing record is left as it is.
        '''
        self._check_admin(caller)
        self._check_phase(ElectionPhase.NOT_STARTED)
        if voter_id in self._voters:
            raise AlreadyRegistered(voter_id)
        voter = Voter(voter_id, is_registered=True)
        self._voters[voter_id] = voter
        logger.info('registered voter %r', voter_id)
        return voter

    def start_election(self, caller: Hashable) -> None:
        self._check_admin(caller)
        self._check_phase(ElectionPhase.NOT_STARTED)
        self._phase = ElectionPhase.ONGOING
        logger.info('election started with %d candidates and %d voters',
                    len(self._candidates), len(self._voters))

    def end_election(self, caller: Hashable) -> None:
        self._check_admin(caller)
        self._check_phase(ElectionPhase.ONGOING)
        self._phase = ElectionPhase.ENDED
        logger.info('election ended, %d votes cast', self.total_votes_cast())

    # voter operations

    def delegate_vote(self, caller: Hashable, delegate_to: Optional[Hashable]
                      ) -> None:
        '''Delegate the caller's vote to another voter.

        Only the delegation itself is recorded. Whether the delegate is able
        to cast the vote is not examined until the caller casts it through
        :meth:`cast_vote`.

        :param caller: The delegating voter.
        :param delegate_to: The voter to cast the vote through.
        :raises InvalidPhase: If the election is not ongoing.
        :raises NotRegistered: If the caller is not registered.
        :raises AlreadyVoted: If the caller has voted.
        :raises AlreadyDelegated: If the caller has delegated before.
        :raises InvalidDelegate: If the delegate is None or the caller.
        '''
        self._check_phase(ElectionPhase.ONGOING)
        voter = self._registered_voter(caller)
        if voter.has_voted:
            raise AlreadyVoted(caller)
        if voter.vote_delegated:
            raise AlreadyDelegated(caller)
        if delegate_to is None or delegate_to == caller:
            raise InvalidDelegate(caller, delegate_to)
        voter.vote_delegated = True
        voter.delegate_to = delegate_to
        logger.debug('voter %r delegated to %r', caller, delegate_to)

    def cast_vote(self, caller: Hashable, candidate_id: int) -> None:
        '''Cast the caller's vote for a candidate.

        If the caller delegated, the vote is cast through the delegate and
        recorded on the delegate's record; the caller's own record does not
        change. Delegation is not followed beyond one hop: a delegate that
        delegated too cannot cast the vote.

        :param caller: The voting voter.
        :param candidate_id: Identifier of the candidate to vote for.
        :raises InvalidPhase: If the election is not ongoing.
        :raises NotRegistered: If the caller is not registered.
        :raises AlreadyVoted: If the caller has voted.
        :raises DelegateNotRegistered: If the caller's delegate is not
            registered.
        :raises DelegateAlreadyVoted: If the caller's delegate has voted.
        :raises DelegateAlreadyDelegated: If the caller's delegate delegated.
        :raises InvalidCandidate: If unknown candidates are rejected and
            no candidate is registered under the identifier.
        '''
        self._check_phase(ElectionPhase.ONGOING)
        voter = self._registered_voter(caller)
        if voter.has_voted:
            raise AlreadyVoted(caller)
        if voter.vote_delegated:
            voter = self._resolve_delegate(voter)
        if self.reject_unknown_candidates \
                and candidate_id not in self._candidates:
            raise InvalidCandidate(candidate_id)
        tally = self._tally(candidate_id)
        voter.voted_candidate_id = candidate_id
        voter.has_voted = True
        tally.vote_count += 1
        logger.debug('voter %r cast a vote for %r through %r',
                     caller, candidate_id, voter.voter_id)

    def _resolve_delegate(self, voter: Voter) -> Voter:
        delegate = self._voters.get(voter.delegate_to)
        if delegate is None or not delegate.is_registered:
            raise DelegateNotRegistered(voter.voter_id, voter.delegate_to)
        if delegate.has_voted:
            raise DelegateAlreadyVoted(voter.voter_id, voter.delegate_to)
        if delegate.vote_delegated:
            raise DelegateAlreadyDelegated(voter.voter_id, voter.delegate_to)
        return delegate

    def _tally(self, candidate_id: int) -> Candidate:
        if candidate_id in self._candidates:
            return self._candidates[candidate_id]
        if candidate_id not in self._buckets:
            logger.warning('vote for unregistered candidate %r, counting in '
                           'a nameless bucket', candidate_id)
            self._buckets[candidate_id] = Candidate(0, '', '')
        return self._buckets[candidate_id]

    # queries

    def get_candidate_details(self, candidate_id: int) -> CandidateDetails:
        cand = self._candidate_or_blank(candidate_id)
        return CandidateDetails(cand.id, cand.name, cand.proposal)

    def show_election_results(self, candidate_id: int) -> CandidateResult:
        cand = self._candidate_or_blank(candidate_id)
        return CandidateResult(cand.id, cand.name, cand.vote_count)

    def show_all_results(self) -> List[CandidateResult]:
        '''Return the results of all registered candidates in id order.'''
        return [
            self.show_election_results(cand_id)
            for cand_id in self._candidates.keys()
        ]

    def show_election_winner(self) -> WinnerResult:
        '''Return the candidate with the most votes once the election ended.

        Candidates are scanned in the order of their identifiers and the
        leader only changes on a strictly greater count, so a tie goes to
        the candidate with the lowest identifier. Tally buckets for
        unregistered identifiers are not considered.

        :returns: The winner's name, identifier and count; ``('', 0, 0)`` if
            there are no candidates or nobody received a vote.
        :raises InvalidPhase: If the election has not ended yet.
        '''
        self._check_phase(ElectionPhase.ENDED)
        leader = ballotbox.util.first_strict_maximum(
            (cand, cand.vote_count) for cand in self._candidates.values()
        )
        if leader is None:
            return NO_WINNER
        winner, count = leader
        return WinnerResult(winner.name, winner.id, count)

    def get_voter_details(self, voter_id: Hashable) -> VoterDetails:
        voter = self._voters.get(voter_id, Voter(voter_id))
        return VoterDetails(
            voter.is_registered,
            voter.has_voted,
            voter.vote_delegated,
            voter.delegate_to,
            voter.voted_candidate_id,
        )

    def get_voter_profile(self, voter_id: Hashable) -> VoterProfile:
        '''Return what the voter voted for, by candidate name.

        The name is ``'Not voted'`` unless a vote is recorded on the voter's
        own record. A vote cast through a delegate is recorded on the
        delegate's record, so the delegating voter still reads as not voted.
        '''
        voter = self._voters.get(voter_id, Voter(voter_id))
        if voter.has_voted:
            name = self._candidate_or_blank(voter.voted_candidate_id).name
        else:
            name = NOT_VOTED
        return VoterProfile(name, voter.voted_candidate_id,
                            voter.vote_delegated)

    def get_registered_voters(self) -> Tuple[Hashable, ...]:
        return tuple(self._voters.keys())

    def get_total_candidates(self) -> int:
        return len(self._candidates)

    def get_total_voters(self) -> int:
        return len(self._voters)

    def check_election_status(self) -> ElectionPhase:
        return self._phase

    def total_votes_cast(self) -> int:
        '''Return the number of votes counted, including tally buckets.'''
        return sum(
            cand.vote_count
            for cand in (*self._candidates.values(), *self._buckets.values())
        )

    def _candidate_or_blank(self, candidate_id: Any) -> Candidate:
        if candidate_id in self._candidates:
            return self._candidates[candidate_id]
        return self._buckets.get(candidate_id, Candidate(0, '', ''))

    def _registered_voter(self, voter_id: Hashable) -> Voter:
        voter = self._voters.get(voter_id)
        if voter is None or not voter.is_registered:
            raise NotRegistered(voter_id)
        return voter

    def _check_admin(self, caller: Hashable) -> None:
        if caller != self._administrator:
            raise Unauthorized(caller)

    def _check_phase(self, expected: ElectionPhase) -> None:
        if self._phase is not expected:
            raise InvalidPhase(self._phase, expected)

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> 'ElectionEngine':
        '''Restore an engine from a snapshot made by its to_dict() method.'''
        state = {
            key: ballotbox.persist.deserialize_value(val)
            for key, val in params.items()
        }
        if 'administrator' not in state:
            raise ValueError('engine snapshot must name an administrator')
        engine = cls(
            state['administrator'],
            reject_unknown_candidates=state.get(
                'reject_unknown_candidates', False
            ),
        )
        engine._phase = state.get('phase', ElectionPhase.NOT_STARTED)
        if not isinstance(engine._phase, ElectionPhase):
            raise ValueError(f'invalid election phase: {engine._phase!r}')
        for i, cand in enumerate(state.get('candidates', []), start=1):
            if cand.id != i:
                raise ValueError(f'candidate identifiers must be sequential'
                                 f' from 1, got {cand.id} at position {i}')
            engine._candidates[cand.id] = cand
        for cand_id, count in state.get('buckets', {}).items():
            engine._buckets[cand_id] = Candidate(0, '', '', vote_count=count)
        for voter in state.get('voters', []):
            if voter.voter_id in engine._voters:
                raise ValueError(f'duplicate voter: {voter.voter_id!r}')
            engine._voters[voter.voter_id] = voter
        return engine

    def __repr__(self) -> str:
        return (
            f'<ElectionEngine({self._phase},'
            f'{len(self._candidates)} candidates,'
            f'{len(self._voters)} voters)>'
        )
