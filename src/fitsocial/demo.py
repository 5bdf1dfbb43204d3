from __future__ import annotations

import logging

from .demo_data import BASE_TIME, DEMO_USER_ID, create_sample_store
from .llm import ExplanationGenerator
from .service import CommunityService


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    reference_time = BASE_TIME
    service = CommunityService(create_sample_store(reference_time))
    generator = ExplanationGenerator()

    print("--- Feed ---")
    for item in service.fetch_feed(DEMO_USER_ID, limit=5, now=reference_time):
        print(f"{item.type:<8} by {item.user_id}: kudos={len(item.kudos)} comments={len(item.comments)}")

    print("\n--- People you may know ---")
    for suggestion in service.friend_suggestions(DEMO_USER_ID):
        print(f"{suggestion.user_id}: score={suggestion.score} ({generator.build_suggestion_message(suggestion)})")

    print("\n--- Two hops out ---")
    for suggestion in service.friend_suggestions(DEMO_USER_ID, mode="multi_hop"):
        print(f"{suggestion.user_id}: score={suggestion.score} ({generator.build_suggestion_message(suggestion)})")

    print("\n--- Interests ---")
    print(service.analyze_user_interests(DEMO_USER_ID))

    print("\n--- Challenges ---")
    for recommendation in service.recommend_challenges(DEMO_USER_ID, limit=3, now=reference_time):
        print(f"{recommendation.challenge.title}: score={recommendation.score:.2f}")
        print(f"  breakdown={recommendation.breakdown}")
        print(f"  message={generator.build_challenge_message(recommendation)}\n")

    print("--- Groups ---")
    for suggestion in service.suggested_groups(DEMO_USER_ID):
        print(f"{suggestion.group.name}: {suggestion.friend_members} friends of {suggestion.member_count} members")


if __name__ == "__main__":
    main()
