"""
tek_contagion/graph/edge_list.py — Kinship edge list from group membership.

Two states are tied when they host the same transborder ethnic kinship (TEK)
group. The membership table is long-form (one row per state × group), so the
edge list is the within-group pairing of member states.

Within a group, each state is paired only with members that come after it in
first-seen order. A state already used as a destination is never revisited as
a source for the same partner, so every unordered pair appears at most once
per group. Pairs sharing several groups get one record per group; the year
graph folds them into a single labelled edge.
"""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

EDGE_COLUMNS = ["source", "destination", "group_id", "group_name", "label"]


def group_label(group_id, group_name) -> str:
    """Render the edge label for one shared kinship group."""
    return f"{group_name} ({group_id})"


def build_kinship_edge_list(kinship_df: pd.DataFrame) -> pd.DataFrame:
    """
    Build the source → destination edge records for every shared kinship group.

    Algorithm (quadratic in group size):
        1. Group membership rows by group_id (first-seen order).
        2. De-duplicate member states within the group, preserving order.
        3. Emit (members[i], members[j]) for every i < j.

    Args:
        kinship_df: Membership table with columns state_id, group_id and
                    optionally group_name (defaults to the group id).

    Returns:
        DataFrame with columns source, destination, group_id, group_name,
        label. One row per unordered state pair per shared group. Empty input
        (or groups with a single member) yields an empty frame with the same
        columns.

    Notes:
        - source/destination orientation carries no meaning; the year graph
          is undirected.
        - Self-pairs cannot occur because members are de-duplicated first.
    """
    if kinship_df.empty:
        return pd.DataFrame(columns=EDGE_COLUMNS)

    has_names = "group_name" in kinship_df.columns
    records: list[dict] = []

    for group_id, members in kinship_df.groupby("group_id", sort=False):
        group_name = members["group_name"].iloc[0] if has_names else str(group_id)
        states = list(dict.fromkeys(members["state_id"].tolist()))
        if len(states) < 2:
            continue

        label = group_label(group_id, group_name)
        for i, source in enumerate(states):
            for destination in states[i + 1:]:
                records.append(
                    {
                        "source": source,
                        "destination": destination,
                        "group_id": group_id,
                        "group_name": group_name,
                        "label": label,
                    }
                )

    edges = pd.DataFrame(records, columns=EDGE_COLUMNS)
    logger.debug(
        "Edge list built: %d records from %d kinship groups.",
        len(edges),
        kinship_df["group_id"].nunique(),
    )
    return edges
