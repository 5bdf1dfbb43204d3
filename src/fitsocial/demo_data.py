from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from .store import InMemoryStore

BASE_TIME = datetime(2025, 10, 3, 18, 30, tzinfo=timezone.utc)

DEMO_USER_ID = "u_alex"

PROFILES = [
    {"id": "u_alex", "username": "alex", "full_name": "Alex Kim", "fitness_goal": "build_muscle",
     "training_level": "intermediate", "age": 29, "bio": "Lifting and long runs", "is_premium": True},
    {"id": "u_bella", "username": "bella", "full_name": "Bella Cho", "fitness_goal": "lose_weight",
     "training_level": "beginner", "age": 31, "bio": "Morning yoga person"},
    {"id": "u_chris", "username": "chris", "full_name": "Chris Park", "fitness_goal": "build_muscle",
     "training_level": "advanced", "age": 35, "bio": None},
    {"id": "u_dana", "username": "dana", "full_name": "Dana Lee", "fitness_goal": "endurance",
     "training_level": "intermediate", "age": 27, "bio": "Half marathon in training"},
    {"id": "u_eli", "username": "eli", "full_name": "Eli Jung", "fitness_goal": "build_muscle",
     "training_level": "intermediate", "age": 30, "bio": "Powerlifting"},
    {"id": "u_fay", "username": "fay", "full_name": "Fay Song", "fitness_goal": "mindfulness",
     "training_level": "beginner", "age": 42, "bio": None},
    {"id": "u_gus", "username": "gus", "full_name": "Gus Han", "fitness_goal": "endurance",
     "training_level": "advanced", "age": 24, "bio": "Trail runner"},
    {"id": "u_hana", "username": "hana", "full_name": "Hana Yoon", "fitness_goal": "mindfulness",
     "training_level": "intermediate", "age": 33, "bio": "Meditation every day"},
]

FRIENDSHIPS = [
    ("u_alex", "u_bella", "accepted"),
    ("u_alex", "u_chris", "accepted"),
    ("u_bella", "u_dana", "accepted"),
    ("u_chris", "u_dana", "accepted"),
    ("u_dana", "u_eli", "accepted"),
    ("u_bella", "u_fay", "accepted"),
    ("u_eli", "u_gus", "accepted"),
    ("u_hana", "u_fay", "accepted"),
    ("u_alex", "u_gus", "pending"),
    ("u_hana", "u_alex", "declined"),
]

GROUPS = [
    {"id": "g_lifters", "name": "Seoul Lifters", "created_by": "u_chris", "is_private": False},
    {"id": "g_runners", "name": "Han River Runners", "created_by": "u_dana", "is_private": False},
    {"id": "g_calm", "name": "Calm Minds", "created_by": "u_fay", "is_private": True},
    {"id": "g_alex", "name": "Alex's Crew", "created_by": "u_alex", "is_private": False},
]

GROUP_MEMBERS = [
    ("g_lifters", "u_chris"), ("g_lifters", "u_eli"), ("g_lifters", "u_alex"),
    ("g_runners", "u_dana"), ("g_runners", "u_bella"), ("g_runners", "u_chris"), ("g_runners", "u_gus"),
    ("g_calm", "u_fay"), ("g_calm", "u_bella"), ("g_calm", "u_hana"),
    ("g_alex", "u_alex"), ("g_alex", "u_bella"),
]

# Han River route points used for the demo runs
RIVER_ROUTE = [
    (37.5283, 126.9326),
    (37.5265, 126.9388),
    (37.5249, 126.9451),
    (37.5231, 126.9517),
    (37.5212, 126.9580),
]


def create_sample_tables(now: Optional[datetime] = None) -> Dict[str, List[Dict[str, Any]]]:
    """Build every table the community service reads, relative to ``now``."""
    now = now or BASE_TIME

    def ago(hours: float) -> datetime:
        return now - timedelta(hours=hours)

    workouts = [
        {"id": "w1", "user_id": "u_alex", "workout_name": "Push day", "description": "Strength training, chest and triceps",
         "duration_minutes": 60, "completed_at": ago(20)},
        {"id": "w2", "user_id": "u_alex", "workout_name": "Pull day", "description": "Weight training for back",
         "duration_minutes": 55, "completed_at": ago(44)},
        {"id": "w3", "user_id": "u_alex", "workout_name": "Leg day", "description": "Muscle building squats",
         "duration_minutes": 70, "completed_at": ago(68)},
        {"id": "w4", "user_id": "u_alex", "workout_name": "Mobility", "description": "Stretching",
         "duration_minutes": 20, "completed_at": ago(92)},
        {"id": "w5", "user_id": "u_chris", "workout_name": "Push day", "description": "Heavy bench session",
         "duration_minutes": 75, "completed_at": ago(3)},
        {"id": "w6", "user_id": "u_bella", "workout_name": "Yoga flow", "description": "Vinyasa",
         "duration_minutes": 40, "completed_at": ago(10)},
        {"id": "w7", "user_id": "u_eli", "workout_name": "Deadlift", "description": "Strength block week 3",
         "duration_minutes": 65, "completed_at": ago(5)},
    ]

    mental_sessions = [
        {"id": "m1", "profile_id": "u_alex", "session_type": "meditation", "description": "Evening wind down",
         "duration_minutes": 10, "calmness_level": 7, "completed_at": ago(26)},
        {"id": "m2", "profile_id": "u_bella", "session_type": "breathing", "description": "Box breathing",
         "duration_minutes": 5, "calmness_level": 6, "completed_at": ago(1)},
        {"id": "m3", "profile_id": "u_fay", "session_type": "meditation", "description": "Body scan",
         "duration_minutes": 20, "calmness_level": 9, "completed_at": ago(8)},
    ]

    runs = [
        {"id": "r1", "user_id": "u_alex", "distance_meters": 8200, "duration_seconds": 2820,
         "start_time": ago(30), "path": RIVER_ROUTE},
        {"id": "r2", "user_id": "u_alex", "distance_meters": 6100, "duration_seconds": 2100,
         "start_time": ago(80), "path": RIVER_ROUTE[:4]},
        {"id": "r3", "user_id": "u_dana", "distance_meters": 21100, "duration_seconds": 6900,
         "start_time": ago(14), "path": list(reversed(RIVER_ROUTE))},
        {"id": "r4", "user_id": "u_chris", "distance_meters": 3000, "duration_seconds": 1080,
         "start_time": ago(60), "path": RIVER_ROUTE[1:3]},
    ]

    personal_records = [
        {"id": "p1", "profile_id": "u_alex", "exercise": "bench press", "weight": 100, "created_at": ago(20)},
        {"id": "p2", "profile_id": "u_chris", "exercise": "squat", "weight": 160, "created_at": ago(2)},
        {"id": "p3", "profile_id": "u_eli", "exercise": "deadlift", "weight": 220, "created_at": ago(6)},
    ]

    challenges = [
        {"id": "c_push", "title": "30 Push Workouts", "type": "workout", "difficulty": "hard", "target": 30,
         "unit": "workouts", "reward_points": 300, "end_date": now + timedelta(days=2),
         "created_at": now - timedelta(days=20), "is_active": True},
        {"id": "c_calm", "title": "Mindful Week", "type": "mental", "difficulty": "easy", "target": 7,
         "unit": "sessions", "reward_points": 100, "end_date": now + timedelta(days=6),
         "created_at": now - timedelta(days=3), "is_active": True},
        {"id": "c_100k", "title": "100 km October", "type": "run", "difficulty": "expert", "target": 100,
         "unit": "km", "reward_points": 500, "end_date": now + timedelta(days=28),
         "created_at": now - timedelta(days=2), "is_active": True},
        {"id": "c_water", "title": "Hydration Habit", "type": "nutrition", "difficulty": "easy", "target": 14,
         "unit": "days", "reward_points": 50, "end_date": now + timedelta(days=12),
         "created_at": now - timedelta(days=1), "is_active": True},
        {"id": "c_sleep", "title": "Lights Out by 11", "type": "sleep", "difficulty": "medium", "target": 10,
         "unit": "nights", "reward_points": 150, "end_date": now + timedelta(hours=20),
         "created_at": now - timedelta(days=9), "is_active": True},
        {"id": "c_pr", "title": "New PR Month", "type": "learning", "difficulty": "medium", "target": 3,
         "unit": "records", "reward_points": 200, "end_date": now + timedelta(days=9),
         "created_at": now - timedelta(days=5), "is_active": True},
        {"id": "c_old", "title": "Summer Steps", "type": "run", "difficulty": "easy", "target": 50,
         "unit": "km", "reward_points": 100, "end_date": now - timedelta(days=3),
         "created_at": now - timedelta(days=40), "is_active": True},
    ]

    participants = [
        ("c_push", "u_chris", 12, False, 10), ("c_push", "u_eli", 18, False, 12), ("c_push", "u_bella", 4, False, 5),
        ("c_calm", "u_fay", 5, False, 2), ("c_calm", "u_hana", 7, True, 3),
        ("c_100k", "u_dana", 64, False, 2), ("c_100k", "u_gus", 71, False, 2), ("c_100k", "u_alex", 22, False, 1),
        ("c_sleep", "u_bella", 8, False, 8),
    ]

    return {
        "profiles": [dict(row) for row in PROFILES],
        "friends": [
            {"user_id": user_id, "friend_id": friend_id, "status": status}
            for user_id, friend_id, status in FRIENDSHIPS
        ],
        "user_workout_logs": workouts,
        "mental_session_logs": mental_sessions,
        "runs": runs,
        "personal_records": personal_records,
        "workout_kudos": [
            {"id": "k1", "workout_id": "w1", "user_id": "u_bella"},
            {"id": "k2", "workout_id": "w5", "user_id": "u_alex"},
            {"id": "k3", "workout_id": "w5", "user_id": "u_dana"},
        ],
        "mental_session_kudos": [
            {"id": "k4", "session_id": "m2", "user_id": "u_fay"},
        ],
        "run_kudos": [
            {"id": "k5", "run_id": "r3", "user_id": "u_alex"},
            {"id": "k6", "run_id": "r3", "user_id": "u_bella"},
            {"id": "k7", "run_id": "r3", "user_id": "u_chris"},
        ],
        "workout_comments": [
            {"id": "cm1", "workout_id": "w5", "user_id": "u_alex", "content": "Huge session!"},
        ],
        "mental_session_comments": [],
        "run_comments": [
            {"id": "cm2", "run_id": "r3", "user_id": "u_chris", "content": "Race pace already"},
            {"id": "cm3", "run_id": "r1", "user_id": "u_dana", "content": "Nice loop"},
        ],
        "challenges": challenges,
        "challenge_participants": [
            {"challenge_id": challenge_id, "user_id": user_id, "progress": progress, "completed": completed,
             "joined_at": now - timedelta(days=days)}
            for challenge_id, user_id, progress, completed, days in participants
        ],
        "challenge_progress_logs": [],
        "groups": [dict(row) for row in GROUPS],
        "group_members": [{"group_id": group_id, "user_id": user_id} for group_id, user_id in GROUP_MEMBERS],
    }


def create_sample_store(now: Optional[datetime] = None) -> InMemoryStore:
    return InMemoryStore(create_sample_tables(now))
