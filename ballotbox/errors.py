'''Rejection outcomes of election engine operations.

Every operation of :class:`ballotbox.engine.ElectionEngine` either completes
fully or raises one of the subclasses of :class:`ElectionError` defined here
without changing any state. The exceptions keep the offending values as
attributes so that a caller relaying them to end users can present them
in any form it needs.
'''

import abc
from typing import Any, Optional


class ElectionError(Exception, metaclass=abc.ABCMeta):
    '''An operation was rejected given the election rules.'''
    pass


class Unauthorized(ElectionError):
    '''A caller other than the administrator invoked an admin-only operation.

    :param caller: Identifier of the rejected caller.
    '''
    def __init__(self, caller: Any):
        self.caller = caller
        super().__init__(f'caller {caller!r} is not the administrator')


class InvalidPhase(ElectionError):
    '''An operation was invoked outside its required lifecycle phase.

    :param phase: Phase the election was in at the time of the call.
    :param expected: Phase the operation requires.
    '''
    def __init__(self, phase: Any, expected: Any = None):
        self.phase = phase
        self.expected = expected
        message = f'invalid election phase: {phase}'
        if expected is not None:
            message += f', must be {expected}'
        super().__init__(message)


class AlreadyRegistered(ElectionError):
    '''A voter identifier was registered a second time.'''
    def __init__(self, voter_id: Any):
        self.voter_id = voter_id
        super().__init__(f'voter {voter_id!r} is already registered')


class NotRegistered(ElectionError):
    '''The calling voter is not registered.'''
    def __init__(self, voter_id: Any):
        self.voter_id = voter_id
        super().__init__(f'voter {voter_id!r} is not registered')


class AlreadyVoted(ElectionError):
    '''The calling voter has already voted.'''
    def __init__(self, voter_id: Any):
        self.voter_id = voter_id
        super().__init__(f'voter {voter_id!r} has already voted')


class AlreadyDelegated(ElectionError):
    '''The calling voter has already delegated their vote.'''
    def __init__(self, voter_id: Any):
        self.voter_id = voter_id
        super().__init__(f'voter {voter_id!r} has already delegated')


class InvalidDelegate(ElectionError):
    '''A delegate target is invalid.

    Raised directly at delegation time if the target is missing or the
    delegating voter themselves; its subclasses are raised at vote casting
    time when the recorded target turns out to be unable to cast the vote.

    :param voter_id: The delegating voter.
    :param delegate: The delegate target.
    '''
    reason: str = 'is not a valid delegate'

    def __init__(self, voter_id: Any, delegate: Optional[Any] = None):
        self.voter_id = voter_id
        self.delegate = delegate
        super().__init__(
            f'{delegate!r} {self.reason} for voter {voter_id!r}'
        )


class DelegateNotRegistered(InvalidDelegate):
    '''The delegate target is not a registered voter.'''
    reason = 'is not registered and cannot act as a delegate'


class DelegateAlreadyVoted(InvalidDelegate):
    '''The delegate target has already cast a vote.'''
    reason = 'has already voted and cannot act as a delegate'


class DelegateAlreadyDelegated(InvalidDelegate):
    '''The delegate target has delegated too; chains are not followed.'''
    reason = 'has delegated their own vote and cannot act as a delegate'


class InvalidCandidate(ElectionError):
    '''A vote names a candidate identifier that was never registered.

    Only raised by engines constructed with ``reject_unknown_candidates``.
    '''
    def __init__(self, candidate_id: Any):
        self.candidate_id = candidate_id
        super().__init__(f'invalid candidate: {candidate_id!r}')
