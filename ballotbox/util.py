'''Tally helpers shared by the engine and the command line tool.

There should normally be no need to use these functions directly.
'''

import operator
from typing import Any, List, Tuple, Dict, Iterable, Optional


def first_strict_maximum(tallies: Iterable[Tuple[Any, int]],
                         floor: int = 0,
                         ) -> Optional[Tuple[Any, int]]:
    '''Return the first item whose count is strictly the greatest.

    The leader only changes when a later item has a strictly greater count,
    so ties are resolved in favour of the item encountered first. Items
    that do not exceed the floor can never lead.

    :param tallies: Pairs of keys and counts, in the order to scan them.
    :param floor: Count that the leader must exceed.
    :returns: The leading pair, or None if no count exceeds the floor.
    '''
    leader = None
    best = floor
    for key, count in tallies:
        if count > best:
            leader = (key, count)
            best = count
    return leader


def sorted_tallies(tallies: Dict[Any, int],
                   descending: bool = True,
                   ) -> List[Tuple[Any, int]]:
    '''Return tally items sorted by count, keeping input order among ties.'''
    return sorted(
        tallies.items(),
        key=operator.itemgetter(1),
        reverse=descending,
    )
