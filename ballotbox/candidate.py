'''Candidates standing in the election.'''

from ballotbox.persist import simple_serialization


@simple_serialization
class Candidate:
    '''A candidate registered by the administrator.

    Candidates are owned by the engine; apart from the tally, they do not
    change after registration.

    :param id: Sequential identifier assigned at registration, starting
        at 1. Zero marks a tally bucket that was created by a vote for an
        identifier no candidate was registered under.
    :param name: Name of the candidate, in any customary text format.
    :param proposal: A short statement of what the candidate stands for.
    :param vote_count: Number of votes counted for the candidate so far.
    '''
    def __init__(self,
                 id: int,
                 name: str,
                 proposal: str,
                 vote_count: int = 0,
                 ):
        self.id = id
        self.name = name
        self.proposal = proposal
        self.vote_count = vote_count

    def __eq__(self, other) -> bool:
        if not isinstance(other, Candidate):
            return NotImplemented
        return (
            (self.id, self.name, self.proposal, self.vote_count)
            == (other.id, other.name, other.proposal, other.vote_count)
        )

    def __repr__(self) -> str:
        return f'<Candidate({self.id},{self.name},{self.vote_count})>'
