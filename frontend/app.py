import streamlit as st

import api_client
from api_client import BackendError

PAGE_TITLE = "TubeMaster AI · Creator Toolkit"

STYLES = {
    "realistic": "📸 Hyper Realistic",
    "3d": "🧊 3D Render",
    "cinematic": "🎬 Cinematic",
    "anime": "🎌 Anime / Drawn",
    "minimalist": "⬜ Minimalist",
    "cyberpunk": "🌃 Neon / Cyber",
}
MOODS = ["Exciting", "Happy", "Serious", "Mystery", "Educational"]

st.set_page_config(
    page_title=PAGE_TITLE,
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ---------- STYLING ----------
st.markdown(
    """
    <style>
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap');

    * {
        font-family: 'Inter', system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
    }

    [data-testid="stAppViewContainer"] {
        background:
            radial-gradient(circle at top left, #1f2937 0, transparent 55%),
            #020617;
        color: #e5e7eb;
    }

    .section-label {
        font-size: 0.78rem;
        text-transform: uppercase;
        color: #6b7280;
        margin-bottom: 0.55rem;
        letter-spacing: 0.12em;
    }

    .winner-badge {
        display: inline-flex;
        padding: 0.20rem 0.9rem;
        background: linear-gradient(135deg, #22c55e, #4ade80);
        border-radius: 999px;
        color: #022c22;
        font-weight: 700;
    }

    div.stButton > button {
        border-radius: 999px;
        padding: 0.4rem 1.4rem;
        border: 1px solid rgba(56,189,248,0.6);
        background: radial-gradient(circle at top left, #38bdf8, #0ea5e9);
        color: #0b1220;
        font-weight: 600;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# ---------- STATE ----------
# A failed call never overwrites the last good result.
for key, default in {
    "keywords": [],
    "script": None,
    "titles": [],
    "best_time": "",
    "competitor": None,
    "thumbnail": None,
    "thumb_history": [],
    "thumb_session_id": "",
    "comparison": None,
}.items():
    if key not in st.session_state:
        st.session_state[key] = default


def run(label: str, fn, *args, **kwargs):
    try:
        with st.spinner(label):
            return fn(*args, **kwargs)
    except BackendError as e:
        st.error(str(e))
        return None


st.markdown(f"<h2>{PAGE_TITLE}</h2>", unsafe_allow_html=True)

tabs = st.tabs(
    [
        "Keyword Finder",
        "Script Writer",
        "Thumbnail Generator",
        "Thumbnail A/B",
        "Competitor Analysis",
        "Titles & Best Time",
    ]
)

# =========================================================
# KEYWORDS
# =========================================================
with tabs[0]:
    topic = st.text_input("Topic", key="kw_topic")
    if st.button("Find keywords") and topic:
        data = run("Analyzing keywords…", api_client.find_keywords, topic)
        if data is not None:
            if not data:
                st.warning("No keywords found. Try a simpler topic.")
            st.session_state.keywords = data
    if st.session_state.keywords:
        st.dataframe(st.session_state.keywords, use_container_width=True)

# =========================================================
# SCRIPT
# =========================================================
with tabs[1]:
    script_title = st.text_input("Video title", key="script_title")
    script_audience = st.text_input("Target audience", value="General Audience", key="script_audience")
    if st.button("Write script") and script_title:
        data = run("Writing script…", api_client.generate_script, script_title, script_audience)
        if data is not None:
            st.session_state.script = data
    script = st.session_state.script
    if script:
        st.subheader(script.get("title", ""))
        st.caption(f"{script.get('estimated_duration', '')} · {script.get('target_audience', '')}")
        for section in script.get("sections", []):
            with st.expander(f"{section.get('logic_step') or section.get('title')} · {section.get('duration', '')}"):
                st.write(section.get("content", ""))
                if section.get("visual_cue"):
                    st.caption(f"🎥 {section['visual_cue']}")
                if section.get("psychological_trigger"):
                    st.caption(f"🧠 {section['psychological_trigger']}")

# =========================================================
# THUMBNAIL GENERATOR
# =========================================================
with tabs[2]:
    left, right = st.columns([0.4, 0.6])
    with left:
        gen_prompt = st.text_area("Describe your vision", height=100)
        gen_style = st.selectbox("Style", list(STYLES), format_func=STYLES.get)
        gen_mood = st.selectbox("Mood", MOODS)
        gen_optimize = st.checkbox("Optimize prompt for CTR", value=True)
        if st.button("Generate thumbnail") and gen_prompt:
            data = run(
                "Generating…",
                api_client.generate_thumbnail,
                gen_prompt,
                gen_style,
                gen_mood,
                gen_optimize,
                st.session_state.thumb_session_id,
            )
            if data is not None:
                st.session_state.thumb_session_id = data["session_id"]
                st.session_state.thumbnail = data["result"]
                st.session_state.thumb_history.insert(0, data["result"])
    with right:
        current = st.session_state.thumbnail
        if current:
            st.image(current["image_url"], use_container_width=True)
            st.caption(current["optimized_prompt"])
        if st.session_state.thumb_history:
            st.markdown('<div class="section-label">Session history</div>', unsafe_allow_html=True)
            cols = st.columns(4)
            for i, item in enumerate(st.session_state.thumb_history[:8]):
                cols[i % 4].image(item["image_url"], caption=item["style"])

# =========================================================
# THUMBNAIL A/B
# =========================================================
with tabs[3]:
    provider = st.selectbox("Vision model", ["OPENROUTER", "GROQ"])
    user_key = st.text_input("API key (optional, overrides .env)", type="password")
    col_a, col_b = st.columns(2)
    with col_a:
        upload_a = st.file_uploader("Thumbnail A", type=["png", "jpg", "jpeg", "webp"], key="upload_a")
        if upload_a:
            st.image(upload_a, use_container_width=True)
    with col_b:
        upload_b = st.file_uploader("Thumbnail B", type=["png", "jpg", "jpeg", "webp"], key="upload_b")
        if upload_b:
            st.image(upload_b, use_container_width=True)

    if st.button("Compare thumbnails"):
        if upload_a is None or upload_b is None:
            st.warning("Please upload both thumbnails for analysis.")
        else:
            data = run(
                "Running visual comparison…",
                api_client.compare_thumbnails,
                (upload_a.name, upload_a.getvalue(), upload_a.type),
                (upload_b.name, upload_b.getvalue(), upload_b.type),
                provider,
                user_key,
            )
            if data is not None:
                st.session_state.comparison = data

    comparison = st.session_state.comparison
    if comparison:
        st.markdown(
            f"<span class='winner-badge'>Winner: {comparison['winner']}</span>",
            unsafe_allow_html=True,
        )
        m1, m2 = st.columns(2)
        m1.metric("Score A", comparison["score_a"])
        m2.metric("Score B", comparison["score_b"])
        st.write(comparison.get("reasoning", ""))
        if comparison.get("breakdown"):
            st.table(comparison["breakdown"])

# =========================================================
# COMPETITOR
# =========================================================
with tabs[4]:
    channel_url = st.text_input("Channel URL")
    if st.button("Analyze channel") and channel_url:
        data = run("Analyzing channel…", api_client.analyze_competitor, channel_url)
        if data is not None:
            st.session_state.competitor = data
    report = st.session_state.competitor
    if report:
        st.subheader(report.get("channel_name") or channel_url)
        c1, c2, c3 = st.columns(3)
        for col, title, key in (
            (c1, "Strengths", "strengths"),
            (c2, "Weaknesses", "weaknesses"),
            (c3, "Content gaps", "content_gaps"),
        ):
            col.write(f"**{title}**")
            for line in report.get(key, []):
                col.write("- " + line)
        st.write("**Action plan**")
        st.write(report.get("action_plan", ""))

# =========================================================
# TITLES + BEST TIME
# =========================================================
with tabs[5]:
    t_left, t_right = st.columns(2)
    with t_left:
        title_topic = st.text_input("Video topic", key="title_topic")
        if st.button("Generate titles") and title_topic:
            data = run("Brainstorming…", api_client.generate_titles, title_topic)
            if data is not None:
                st.session_state.titles = data
        for i, t in enumerate(st.session_state.titles, start=1):
            st.write(f"{i}. {t}")
    with t_right:
        time_title = st.text_input("Video title", key="time_title")
        time_audience = st.text_input("Audience", value="General Audience", key="time_audience")
        time_tags = st.text_input("Tags (optional)", key="time_tags")
        if st.button("Suggest publish time") and time_title:
            data = run("Thinking…", api_client.suggest_best_time, time_title, time_audience, time_tags)
            if data is not None:
                st.session_state.best_time = data
        if st.session_state.best_time:
            st.info(st.session_state.best_time)
