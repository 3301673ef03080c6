"""A commandline tool to replay a transcript of election engine calls.

Runs the calls against a fresh engine, reports the outcome of each, and
shows the election status and results at the end.
"""

import argparse
import io
import json
import logging
import sys
import warnings
from typing import Any, Optional, List

import ballotbox.persist
import ballotbox.util
import ballotbox.io.transcript
from ballotbox.engine import ElectionEngine, ElectionPhase
from ballotbox.io.transcript import Outcome

argparser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='transcript file to replay',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='read the transcript from standard input',
)
argparser.add_argument(
    '-a', '--administrator',
    help='administrator identifier (overrides the transcript header)',
)
argparser.add_argument(
    '-r', '--reject-unknown-candidates',
    action='store_true',
    help='reject votes for candidates that were never registered',
)
argparser.add_argument(
    '-k', '--keep-going',
    action='store_true',
    help='report rejected calls and continue instead of stopping',
)
argparser.add_argument(
    '-s', '--snapshot',
    type=argparse.FileType('w', encoding='utf8'),
    help='write the final engine state as JSON to this file',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all engine log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any engine log messages',
)


def main(input_file: Optional[io.TextIOBase],
         use_stdin: bool = False,
         administrator: Optional[str] = None,
         reject_unknown_candidates: bool = False,
         keep_going: bool = False,
         snapshot: Optional[io.TextIOBase] = None,
         verbose: bool = False,
         quiet: bool = False,
         ) -> int:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    transcript = ballotbox.io.transcript.load(input_file)
    if not transcript.calls:
        warnings.warn('empty transcript: nothing to replay, terminating')
        return 0
    if reject_unknown_candidates:
        transcript.reject_unknown_candidates = True
    engine = transcript.create_engine(administrator)
    engine, outcomes = ballotbox.io.transcript.replay(
        transcript, engine, keep_going=keep_going
    )
    show_outcomes(outcomes)
    print()
    show_results(engine)
    if snapshot is not None:
        json.dump(ballotbox.persist.to_dict(engine), snapshot, indent=2)
    if outcomes and not outcomes[-1].ok and not keep_going:
        return 1
    return 0


def format_result(result: Any) -> str:
    if result is None:
        return 'ok'
    elif hasattr(result, '_asdict'):
        return ', '.join(f'{key}={val!r}' for key, val in result._asdict().items())
    elif isinstance(result, list):
        return '; '.join(format_result(item) for item in result)
    else:
        return str(result)


def show_outcomes(outcomes: List[Outcome]) -> None:
    n_just_chars = max(len(outcome.call.op) for outcome in outcomes)
    for outcome in outcomes:
        caller = '' if outcome.call.caller is None else f' ({outcome.call.caller})'
        verdict = (
            format_result(outcome.result) if outcome.ok
            else f'REJECTED {type(outcome.error).__name__}: {outcome.error}'
        )
        print(outcome.call.op.ljust(n_just_chars), caller.ljust(12), verdict)


def show_results(engine: ElectionEngine) -> None:
    """Show the status, the standings and the winner if known."""
    print(f'Election status: {engine.check_election_status()}')
    print(f'{engine.get_total_candidates()} candidates, '
          f'{engine.get_total_voters()} voters, '
          f'{engine.total_votes_cast()} votes cast')
    standings = ballotbox.util.sorted_tallies({
        f'{cand.id} {cand.name}': cand.vote_count
        for cand in engine.candidates
    })
    if standings:
        n_just_chars = max(len(label) for label, _ in standings)
        for label, count in standings:
            print(' ' * 4 + label.ljust(n_just_chars), ' ', count)
    for cand_id, count in engine.buckets.items():
        print(f'    unregistered candidate {cand_id!r}: {count}')
    if engine.check_election_status() is ElectionPhase.ENDED:
        winner = engine.show_election_winner()
        if winner.id:
            print(f'Winner: {winner.name} ({winner.id}) with '
                  f'{winner.vote_count} votes')
        else:
            print('Nobody elected')


def run() -> None:
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        try:
            exit_code = main(**vars(args))
        except ValueError as e:
            argparser.error(str(e))
        sys.exit(exit_code)


if __name__ == '__main__':
    run()
