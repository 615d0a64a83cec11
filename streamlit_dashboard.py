import html

import streamlit as st
import pandas as pd
import plotly.express as px

from snapscape.config import (
    LEADERBOARD_LIMIT,
    NO_SUBMISSIONS_MESSAGE,
    RESULTS_UNAVAILABLE_MESSAGE,
    SNAPSHOT_FOLDER,
)
from snapscape.ingestion.snapshot import DataFetchError, SnapshotStore
from snapscape.results.engine import (
    compute_competition_results,
    ranked_to_frame,
    results_cache_key,
    standings_to_frame,
)
from snapscape.results.photographers import top_contributors
from snapscape.results.ranking import display_order, top_submissions
from snapscape.results.reconciler import compute_profile_stats

# --- Page Configuration ---
st.set_page_config(
    page_title="SnapScape Results",
    page_icon="📷",
    layout="wide",
    initial_sidebar_state="collapsed"
)

# --- Design System ---
ACCENT_COLORS = {
    "primary": "#FF6B6B",       # Coral red - primary accent
    "success": "#10B981",
    "warning": "#F59E0B",
    "info": "#3B82F6",
    "chart_palette": [
        "#FF6B6B", "#3B82F6", "#10B981", "#F59E0B", "#8B5CF6",
        "#EC4899", "#06B6D4", "#84CC16", "#F97316", "#6366F1"
    ],
}

# --- Podium Flourishes ---
RANK_ICONS = {
    1: {"icon": "🥇", "color": "#FFD700", "label": "Gold Medal"},
    2: {"icon": "🥈", "color": "#C0C0C0", "label": "Silver Medal"},
    3: {"icon": "🥉", "color": "#CD7F32", "label": "Bronze Medal"},
}

PLOTLY_CONFIG = {'displayModeBar': False, 'scrollZoom': False}

TAB_OPTIONS = ["🏆 Results", "⚖️ Judge View", "👤 Profile"]


def get_rank_badge_html(rank, badge_eligible=True):
    """Generate HTML for a rank badge with icon and styling."""
    if pd.isna(rank):
        return ""
    rank = int(rank)
    if rank not in RANK_ICONS or not badge_eligible:
        return f'<span style="font-weight:600;">#{rank}</span>'

    info = RANK_ICONS[rank]
    badge_style = f'display:inline-flex;align-items:center;gap:0.3rem;font-weight:700;color:{info["color"]};text-shadow:0 0 10px {info["color"]}40;'
    return f'<span style="{badge_style}"><span style="font-size:1.2rem;">{info["icon"]}</span>#{rank}</span>'


def generate_result_cards(df):
    """
    Generate HTML cards for the podium of a competition.
    Shows: Rank badge, Title, Photographer, Total Rating, Points.
    """
    if df.empty:
        return f"<p>{NO_SUBMISSIONS_MESSAGE}</p>"

    card_base = "border:1px solid rgba(255,255,255,0.2);border-radius:12px;padding:1rem;margin-bottom:0.75rem;background:linear-gradient(135deg, var(--secondary-background-color) 0%, rgba(255,107,107,0.15) 100%);"
    label_style = "font-size:0.8rem;text-transform:uppercase;color:var(--text-color);font-weight:500;"
    value_style = "font-size:1.4rem;font-weight:700;color:var(--text-color);"

    cards = []
    for _, row in df.iterrows():
        badge = get_rank_badge_html(row['rank'], bool(row['badge_eligible']))
        title = html.escape(str(row['title']))
        name = html.escape(str(row['photographer_name']))
        stats = (
            f'<div><span style="{label_style}">Total</span> <span style="{value_style}">{row["total_rating"]:g}</span></div>'
            f'<div><span style="{label_style}">Points</span> <span style="{value_style}">{int(row["points"])}</span></div>'
        )
        cards.append(
            f'<div style="{card_base}"><div>{badge} <strong>{title}</strong> by {name}</div>'
            f'<div style="display:flex;gap:2rem;margin-top:0.5rem;">{stats}</div></div>'
        )
    return "".join(cards)


def apply_plotly_style(fig):
    """Apply consistent styling to Plotly figures.

    Text colors are NOT explicitly set, allowing Streamlit to inject theme-aware
    colors automatically.
    """
    system_font = '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif'
    grid_color = "rgba(128, 128, 128, 0.4)"
    line_color = "rgba(128, 128, 128, 0.3)"

    axis_style = dict(
        gridcolor=grid_color,
        linecolor=line_color,
        tickfont=dict(family=system_font, size=13),
        title_font=dict(family=system_font, size=13),
        showgrid=True,
        zeroline=False,
    )
    fig.update_layout(
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(family=system_font, size=16),
        xaxis=axis_style,
        yaxis=axis_style,
        legend=dict(title_text="", bgcolor="rgba(0,0,0,0)", borderwidth=0),
        hoverlabel=dict(bgcolor="rgba(50, 50, 50, 0.9)", font=dict(color="#FFFFFF", family=system_font, size=14)),
        dragmode=False,  # Disable pan/zoom to prevent scroll hijacking on mobile
    )
    return fig


# --- Data Loading Functions ---
@st.cache_data(ttl=60)
def load_snapshot(folder: str):
    """Load the store snapshot from disk."""
    return SnapshotStore.from_folder(folder)


@st.cache_data(ttl=60)
def cached_competition_results(cache_key, _store):
    """Compute a competition's results, keyed on its id, status and latest vote time."""
    return compute_competition_results(cache_key[0], _store)


def get_results(competition, store):
    key = results_cache_key(
        competition.id,
        competition.status,
        store.latest_rating_at(competition.id),
        store.count_approved_submissions(competition.id),
    )
    return cached_competition_results(key, store)


# --- Views ---
def render_results(store, competition):
    results = get_results(competition, store)
    if results.is_empty:
        st.info(NO_SUBMISSIONS_MESSAGE)
        return

    by_average = st.toggle("Order by average rating", value=False, key="order_by_average")
    order_by = "average_rating" if by_average else "total_rating"
    df = ranked_to_frame(display_order(results.ranked, order_by=order_by), results.points)

    st.markdown(generate_result_cards(df[df['badge_eligible']]), unsafe_allow_html=True)

    st.subheader("All Submissions")
    st.dataframe(
        df[['rank', 'placement', 'title', 'photographer_name', 'average_rating',
            'rating_count', 'total_rating', 'multiplier', 'points']],
        hide_index=True,
        use_container_width=True,
        column_config={
            'rank': st.column_config.NumberColumn("Rank", format="%d"),
            'placement': "Place",
            'title': "Title",
            'photographer_name': "Photographer",
            'average_rating': st.column_config.NumberColumn("Avg", format="%.2f"),
            'rating_count': st.column_config.NumberColumn("Votes", format="%d"),
            'total_rating': st.column_config.NumberColumn("Total", format="%.2f"),
            'multiplier': st.column_config.NumberColumn("x", format="%d"),
            'points': st.column_config.NumberColumn("Points", format="%d"),
        },
    )

    top = top_submissions(results.ranked, limit=LEADERBOARD_LIMIT)
    if top:
        st.subheader("Top Rated")
        fig = px.bar(
            x=[r.title for r in top],
            y=[r.total_rating for r in top],
            color_discrete_sequence=[ACCENT_COLORS["primary"]],
        )
        apply_plotly_style(fig)
        fig.update_layout(showlegend=False, height=300, xaxis_title="", yaxis_title="Total Rating")
        st.plotly_chart(fig, use_container_width=True, config=PLOTLY_CONFIG)


def render_judge_view(store, competition):
    results = get_results(competition, store)
    if results.is_empty:
        st.info(NO_SUBMISSIONS_MESSAGE)
        return

    df = standings_to_frame(results.standings)
    col1, col2 = st.columns([3, 2])
    with col1:
        st.subheader("Photographer Standings")
        st.dataframe(
            df[['rank', 'name', 'total_points', 'total_rating', 'total_votes', 'total_submissions', 'average_rating']],
            hide_index=True,
            use_container_width=True,
            column_config={
                'rank': st.column_config.NumberColumn("Rank", format="%d"),
                'name': "Photographer",
                'total_points': st.column_config.NumberColumn("Points", format="%d"),
                'total_rating': st.column_config.NumberColumn("Total", format="%.2f"),
                'total_votes': st.column_config.NumberColumn("Votes", format="%d"),
                'total_submissions': st.column_config.NumberColumn("Photos", format="%d"),
                'average_rating': st.column_config.NumberColumn("Avg", format="%.2f"),
            },
        )
    with col2:
        fig = px.bar(
            df.head(LEADERBOARD_LIMIT), x='total_points', y='name', orientation='h',
            color_discrete_sequence=[ACCENT_COLORS["info"]],
        )
        apply_plotly_style(fig)
        fig.update_layout(height=350, xaxis_title="Points", yaxis_title="", yaxis=dict(autorange="reversed"))
        st.plotly_chart(fig, use_container_width=True, config=PLOTLY_CONFIG)

    submissions = store.get_approved_submissions(competition.id)
    contributors = pd.DataFrame(top_contributors(submissions))
    if not contributors.empty:
        st.subheader("Most Active Photographers")
        st.dataframe(contributors[['name', 'submission_count', 'average_rating']], hide_index=True, use_container_width=True)


def render_profile(store):
    user_ids = store.list_user_ids()
    if not user_ids:
        st.info("No users yet.")
        return

    user_id = st.selectbox("Photographer", user_ids, key="profile_user_select")
    stats = compute_profile_stats(user_id, store)
    breakdown = stats.points_breakdown

    cols = st.columns(4)
    cols[0].metric("Total Points", breakdown.total_points)
    cols[1].metric("Submissions", stats.total_submissions)
    cols[2].metric("Competitions", stats.unique_competitions)
    cols[3].metric("Top 3 Finishes", stats.total_top_three)

    medal_cols = st.columns(3)
    for col, (rank, count) in zip(medal_cols, [(1, stats.first_place), (2, stats.second_place), (3, stats.third_place)]):
        col.metric(f'{RANK_ICONS[rank]["icon"]} {RANK_ICONS[rank]["label"]}', count)

    buckets = pd.DataFrame({
        'source': ["1st place", "2nd place", "3rd place", "Other submissions", "Voting"],
        'points': [
            breakdown.first_place_points, breakdown.second_place_points, breakdown.third_place_points,
            breakdown.other_submissions_points, breakdown.voting_points,
        ],
    })
    buckets = buckets[buckets['points'] > 0]
    if not buckets.empty:
        fig = px.pie(buckets, names='source', values='points', color_discrete_sequence=ACCENT_COLORS["chart_palette"])
        apply_plotly_style(fig)
        fig.update_layout(height=320)
        st.plotly_chart(fig, use_container_width=True, config=PLOTLY_CONFIG)

    if breakdown.details:
        st.subheader("Points by Submission")
        details = pd.DataFrame(breakdown.to_dict()['details'])
        st.dataframe(
            details[['competition_title', 'title', 'rank', 'total_rating', 'rating_count', 'points']],
            hide_index=True,
            use_container_width=True,
        )


def render_competition_view(store, active_tab):
    competitions = store.list_competitions()
    if not competitions:
        st.info("No competitions yet.")
        return

    selected = st.selectbox(
        "Competition",
        competitions,
        format_func=lambda c: f"{c.title} ({c.status}) · {c.id}",
        key="competition_select",
    )
    if active_tab == TAB_OPTIONS[0]:
        render_results(store, selected)
    else:
        render_judge_view(store, selected)


# --- Main App ---
def main():
    st.title("📷 SnapScape Results")

    active_tab = st.radio(
        "Navigation",
        TAB_OPTIONS,
        horizontal=True,
        label_visibility="collapsed",
        key="tab_selector"
    )

    try:
        store = load_snapshot(str(SNAPSHOT_FOLDER))
        if active_tab == TAB_OPTIONS[2]:
            render_profile(store)
        else:
            render_competition_view(store, active_tab)
    except DataFetchError:
        st.error(RESULTS_UNAVAILABLE_MESSAGE)


if __name__ == "__main__":
    main()
