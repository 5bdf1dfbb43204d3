import streamlit as st
import sys
import os
from datetime import datetime, timedelta, timezone
import folium
from streamlit_folium import st_folium

# Load environment variables from .env file
from pathlib import Path
env_path = Path(__file__).parent / '.env'
if env_path.exists():
    with open(env_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                os.environ[key.strip()] = value.strip()

# Add src directory to Python path
src_path = os.path.join(os.getcwd(), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from fitsocial.challenges import progress_percent, progress_status
from fitsocial.demo_data import BASE_TIME, DEMO_USER_ID, PROFILES, RIVER_ROUTE, create_sample_store
from fitsocial.llm import ExplanationGenerator
from fitsocial.openai_scorer import OpenAIZeroShotScorer
from fitsocial.service import CommunityService, SUGGESTION_MODES

st.set_page_config(page_title="Fitness Community Ranking", page_icon="🏃", layout="wide")

# Initialize session state
if 'service' not in st.session_state:
    # OpenAI API-based zero-shot scorer for challenge types without history
    try:
        zero_shot_scorer = OpenAIZeroShotScorer(
            model="gpt-3.5-turbo",
            temperature=0.1,
            max_tokens=500,
        )
        st.session_state.llm_available = True
    except Exception as e:
        st.warning(f"⚠️ OpenAI API initialization failed: {str(e)}. Set OPENAI_API_KEY environment variable.")
        zero_shot_scorer = None
        st.session_state.llm_available = False

    st.session_state.service = CommunityService(create_sample_store(BASE_TIME), zero_shot_scorer=zero_shot_scorer)
    st.session_state.explanation_gen = ExplanationGenerator()

service = st.session_state.service
explanation_gen = st.session_state.explanation_gen
usernames = {row["id"]: row["username"] for row in PROFILES}

# Header
st.title("🏃 Fitness Community Ranking")
st.markdown("**Social feed ranking, friend suggestions and challenge recommendations**")

if st.session_state.get('llm_available', False):
    st.success("🤖 **Zero-Shot Scoring**: OpenAI GPT-3.5-Turbo API active for new challenge types")
else:
    st.info("⚠️ **Zero-Shot Scoring**: Disabled (Set OPENAI_API_KEY environment variable)")

# Sidebar - viewer and reference time
st.sidebar.header("👤 Viewer")
user_ids = list(usernames)
viewer_id = st.sidebar.selectbox(
    "Signed in as:",
    user_ids,
    index=user_ids.index(DEMO_USER_ID),
    format_func=lambda user_id: usernames[user_id],
)

st.sidebar.subheader("⏰ Reference Time")
hours_later = st.sidebar.slider("Hours after sample snapshot", 0, 72, 0)
reference_time = BASE_TIME + timedelta(hours=hours_later)
st.sidebar.markdown(f"**Selected Time:** {reference_time.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M')} UTC")

feed_limit = st.sidebar.slider("Feed items", 1, 20, 8)
suggestion_mode = st.sidebar.selectbox("Suggestion mode", SUGGESTION_MODES)
challenge_limit = st.sidebar.slider("Number of challenges", 1, 10, 5)

feed_tab, friends_tab, challenges_tab, groups_tab = st.tabs(["📰 Feed", "🤝 Friends", "🏆 Challenges", "👥 Groups"])

with feed_tab:
    feed = service.fetch_feed(viewer_id, limit=feed_limit, now=reference_time)
    col1, col2 = st.columns([1, 1])

    with col1:
        st.header("📰 Ranked Feed")
        if feed:
            for i, item in enumerate(feed, 1):
                details = item.details
                with st.container():
                    st.markdown(f"### {i}. {usernames.get(item.user_id, item.user_id)} · `{item.type}`")
                    if item.type == "workout":
                        st.caption(f"{details.get('workout_name')} · {details.get('duration_minutes')} min")
                    elif item.type == "mental":
                        st.caption(f"{details.get('session_type')} · {details.get('duration_minutes')} min")
                    elif item.type == "run":
                        st.caption(f"{(details.get('distance_meters') or 0) / 1000:.1f} km")
                    elif item.type == "pr":
                        st.caption(f"New PR: {details.get('exercise')} {details.get('weight')} kg")
                    st.caption(f"{item.date.strftime('%Y-%m-%d %H:%M')} · 👏 {len(item.kudos)} · 💬 {len(item.comments)}")
                    st.divider()
        else:
            st.info("No activity from you or your friends yet.")

    with col2:
        st.header("🗺️ Runs in Feed")

        m = folium.Map(location=list(RIVER_ROUTE[len(RIVER_ROUTE) // 2]), zoom_start=14, tiles="OpenStreetMap")

        for i, item in enumerate(feed, 1):
            path = item.details.get("path") or []
            if item.type != "run" or not path:
                continue
            color = "green" if i == 1 else "blue"
            popup_html = f"""
            <div style="font-family: sans-serif;">
                <h4>#{i} {usernames.get(item.user_id, item.user_id)}</h4>
                <p><b>Distance:</b> {(item.details.get('distance_meters') or 0) / 1000:.1f} km</p>
                <p><b>Kudos:</b> {len(item.kudos)}</p>
            </div>
            """
            folium.PolyLine([list(point) for point in path], color=color, weight=5, opacity=0.7).add_to(m)
            folium.Marker(
                list(path[0]),
                popup=folium.Popup(popup_html, max_width=200),
                tooltip=f"#{i} run",
                icon=folium.Icon(color=color, icon="info-sign"),
            ).add_to(m)

        st_folium(m, width=700, height=500)

with friends_tab:
    st.header("🤝 People You May Know")
    suggestions = service.friend_suggestions(viewer_id, mode=suggestion_mode)
    if suggestions:
        for suggestion in suggestions:
            name = usernames.get(suggestion.user_id, suggestion.user_id)
            if suggestion_mode == "hybrid":
                st.markdown(f"**{name}**")
                st.progress(max(0.0, min(1.0, suggestion.total_score / 100)), text=f"total {suggestion.total_score:.1f}")
                st.caption(f"mutual {suggestion.mutual_score:.1f} · interest {suggestion.interest_score:.1f}")
            else:
                st.markdown(f"**{name}** · score {suggestion.score:.0f}")
                st.caption(explanation_gen.build_suggestion_message(suggestion))
    else:
        st.info("Add a few friends to get suggestions.")

    with st.expander("🧬 Compatible Profiles", expanded=False):
        for profile, score in service.compatible_profiles(viewer_id)[:5]:
            st.write(f"{profile.username} ({profile.fitness_goal}, {profile.training_level}): {score}")

with challenges_tab:
    col1, col2 = st.columns([1, 1])

    with col1:
        st.header("🏆 Recommended Challenges")
        recommendations = service.recommend_challenges(viewer_id, limit=challenge_limit, now=reference_time)
        if recommendations:
            for i, recommendation in enumerate(recommendations, 1):
                challenge = recommendation.challenge
                st.markdown(f"### {i}. {challenge.title}")
                st.metric("Score", f"{recommendation.score:.2f}")
                st.caption(f"Type: `{challenge.type}` · Difficulty: `{challenge.difficulty}` · "
                           f"Reward: {challenge.reward_points:.0f} pts")
                st.info(f"💬 {explanation_gen.build_challenge_message(recommendation)}")

                if 'llm' in recommendation.breakdown:
                    st.success(f"🤖 **LLM Zero-Shot Score**: {recommendation.breakdown['llm']:.3f}")

                with st.expander("📈 Score Breakdown"):
                    for factor, score in recommendation.breakdown.items():
                        st.write(f"**{factor.capitalize()}**: {score:.2f}")
                st.divider()
        else:
            st.info("No open challenges to recommend right now.")

    with col2:
        st.header("📊 Interest Vector")
        interests = service.analyze_user_interests(viewer_id)
        for category, value in sorted(interests.items(), key=lambda item: item[1], reverse=True):
            st.progress(value / 100, text=f"{category}: {value:.0f}")

        st.header("🎯 My Challenges")
        my_challenges = service.user_challenges(viewer_id)
        if my_challenges:
            for challenge, progress in my_challenges:
                percent = progress_percent(progress, challenge.target)
                st.progress(percent / 100, text=f"{challenge.title}: {progress}/{challenge.target:g} {challenge.unit}")
                st.caption(progress_status(percent))
                with st.expander("🥇 Leaderboard", expanded=False):
                    for entry in service.challenge_leaderboard(challenge.id):
                        name = entry.user.username if entry.user else "unknown"
                        st.text(f"#{entry.rank} {name}: {entry.progress}")
        else:
            st.info("You have not joined any challenges yet.")

with groups_tab:
    st.header("👥 Groups Your Friends Joined")
    group_suggestions = service.suggested_groups(viewer_id)
    if group_suggestions:
        for suggestion in group_suggestions:
            lock = "🔒 " if suggestion.group.is_private else ""
            st.markdown(f"**{lock}{suggestion.group.name}**")
            st.caption(f"{suggestion.friend_members} friends · "
                       f"{suggestion.member_count} members")
    else:
        st.info("None of your friends have joined a group you are not in.")

# Footer - community stats
st.header("📊 Community Statistics")

col_stat1, col_stat2, col_stat3 = st.columns(3)

with col_stat1:
    st.metric("Members", len(PROFILES))

with col_stat2:
    graph = service.social_graph()
    st.metric("Friends", len(graph.get(viewer_id, set())))

with col_stat3:
    st.metric("Snapshot", datetime.strftime(BASE_TIME, '%Y-%m-%d'))
