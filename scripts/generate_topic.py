"""Generate a random topic with fake delegate names for trying out the API.

Delegates get fake names from faker with a fixed seed. Each delegate splits
one unit of weight between a few options and, with some probability,
delegates part of it to other delegates.

Usage:
    python scripts/generate_topic.py
    python scripts/generate_topic.py --delegates 20 --options 5 -o topic.json
    python scripts/generate_topic.py --vote-data
"""

import argparse
import json
import random
import sys
from pathlib import Path

from faker import Faker

sys.path.insert(0, str(Path(__file__).parent.parent))

from liquidvote.models import Topic  # noqa: E402

SEED = 20210401

DELEGATION_PROBABILITY = 0.5


def generate_topic(
    num_delegates: int,
    num_options: int,
    seed: int = SEED,
    delegation_probability: float = DELEGATION_PROBABILITY,
) -> Topic:
    """Build a topic whose ballots mix direct votes and delegation."""
    fake = Faker()
    fake.seed_instance(seed)
    rng = random.Random(seed)

    topic = Topic(fake.catch_phrase(), fake.sentence())

    delegates = []
    while len(delegates) < num_delegates:
        name = fake.first_name()
        if name not in topic.delegate_names():
            delegates.append(topic.add_new_delegate(name))

    options = []
    while len(options) < num_options:
        title = fake.word()
        if title not in topic.option_titles():
            options.append(topic.add_new_option(title))

    for delegate in delegates:
        targets = rng.sample(options, k=rng.randint(1, len(options)))
        others = [d for d in delegates if d != delegate]
        if others and rng.random() < delegation_probability:
            targets += rng.sample(others, k=rng.randint(1, min(2, len(others))))

        weights = [rng.random() for _ in targets]
        total = sum(weights)
        topic.overwrite_vote_for(
            delegate,
            {target: round(w / total, 4) for target, w in zip(targets, weights)},
        )

    return topic


def main():
    parser = argparse.ArgumentParser(description=__doc__.split("\n")[0])
    parser.add_argument("--delegates", type=int, default=5, help="number of delegates")
    parser.add_argument("--options", type=int, default=3, help="number of options")
    parser.add_argument("--seed", type=int, default=SEED)
    parser.add_argument("--vote-data", action="store_true",
                        help="write the label-free vote data instead of the topic")
    parser.add_argument("-o", "--output", type=Path, help="output file (default: stdout)")
    args = parser.parse_args()

    if args.delegates < 1 or args.options < 1:
        parser.error("need at least one delegate and one option")

    topic = generate_topic(args.delegates, args.options, args.seed)
    if args.vote_data:
        payload = topic.to_vote_data().to_dict()
    else:
        payload = topic.to_dict()

    text = json.dumps(payload, indent=2)
    if args.output:
        args.output.write_text(text + "\n")
        print(f"Wrote {args.output}")
    else:
        print(text)


if __name__ == "__main__":
    main()
