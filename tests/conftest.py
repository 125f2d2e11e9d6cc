"""Shared test helpers."""

from liquidvote.models import Topic, VoteData


def make_topic(name: str, ballots: dict[str, dict[str, float]], options: list[str]) -> Topic:
    """Build a Topic whose ids are the given names.

    Args:
        name: Topic title
        ballots: {delegate: {target: weight}}; every key becomes a delegate
        options: Option ids (used as their titles too)

    Returns:
        Topic with delegates, options and ballots populated.
    """
    topic = Topic(name)
    for delegate in ballots:
        topic.add_delegate(delegate, delegate)
    for option in options:
        topic.add_option(option, option)
    for delegate, ballot in ballots.items():
        topic.overwrite_vote_for(delegate, ballot)
    return topic


def make_vote_data(ballots: dict[str, dict[str, float]], options: list[str]) -> VoteData:
    return make_topic("test", ballots, options).to_vote_data()
