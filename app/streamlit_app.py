"""
app/streamlit_app.py

Purpose
-------
A Streamlit dashboard over the student dataset:
  - risk counts per level and cohort metrics
  - filterable, sortable student table with a risk-score histogram
  - per-student quarterly trend view
  - add-student form and CSV / JSON upload, both through IntakePipeline

All scoring, validation and persistence lives in the student_risk package;
this file only reads the store and renders it.
"""

import matplotlib.pyplot as plt
import pandas as pd
import streamlit as st

from student_risk.analytics import quarterly_trend, summarize
from student_risk.config import configure_logging, load_settings
from student_risk.data_dictionary import DATA_DICTIONARY
from student_risk.exceptions import MalformedInputError, PersistenceError, ValidationError
from student_risk.normalize import decode_payload
from student_risk.pipeline import IntakePipeline
from student_risk.scoring import RiskLevel
from student_risk.store import StudentStore


# ---------------------------------------------------------------------
# Streamlit page configuration
# ---------------------------------------------------------------------
st.set_page_config(
    page_title="Student Risk Analysis Dashboard",
    layout="wide",
)
st.title("📈 Student Risk Analysis Dashboard")
st.caption("Early intervention for grades 5–10")

settings = load_settings()


# ---------------------------------------------------------------------
# Store: one per browser session
# ---------------------------------------------------------------------
# Streamlit reruns the script top-to-bottom on every interaction, so the
# store lives in session_state and is loaded from disk only once.

@st.cache_resource
def _logging_ready() -> bool:
    configure_logging(settings.log_level)
    return True


_logging_ready()

if "store" not in st.session_state:
    store = StudentStore(settings.dataset_path, settings.append_store_path)
    try:
        store.load()
    except PersistenceError as e:
        st.warning("Could not load the saved dataset; starting empty.")
        st.code(str(e))
    st.session_state["store"] = store

store: StudentStore = st.session_state["store"]
pipeline = IntakePipeline(store, persist=True)


def _report(exc: Exception) -> None:
    if isinstance(exc, ValidationError):
        where = "" if exc.index is None else f" (record {exc.index + 1})"
        st.error(f"Please correct the highlighted fields{where}.")
        for field, message in exc.errors.items():
            st.write(f"- **{field}**: {message}")
    elif isinstance(exc, PersistenceError):
        st.warning("Student added, but the dataset could not be saved to disk.")
        st.code(str(exc))
    else:
        st.error("Input could not be read.")
        st.code(str(exc))


# ---------------------------------------------------------------------
# Sidebar: add a student / upload a file
# ---------------------------------------------------------------------
st.sidebar.header("Add student")

with st.sidebar.form("add_student"):
    name = st.text_input("Name")
    grade = st.selectbox("Grade", [5, 6, 7, 8, 9, 10])
    gpa = st.number_input("Current GPA (0-10)", 0.0, 10.0, 10.0, step=0.1)
    previous_year_gpa = st.number_input("Previous Year GPA (0-10)", 0.0, 10.0, 10.0, step=0.1)
    math_score = st.number_input("Math Score", 0, 100, 100)
    reading_score = st.number_input("Reading Score", 0, 100, 100)
    science_score = st.number_input("Science Score", 0, 100, 100)
    attendance = st.number_input("Attendance Rate (%)", 0, 100, 100)
    behavior_incidents = st.number_input("Behavior Incidents", 0, value=0)
    mental_health_score = st.number_input("Mental Health Score (1-5)", 1, 5, 5)
    peer_relationships_score = st.number_input("Peer Relationships Score (1-5)", 1, 5, 5)
    parent_involvement = st.number_input("Parent Involvement (1-5)", 1, 5, 5)
    extracurricular_activities = st.number_input("Extracurricular Activities", 0, value=0)
    study_group_participation = st.number_input("Study Group Participation", 0, value=0)
    tutoring_sessions = st.number_input("Tutoring Sessions", 0, value=0)
    missed_assignments = st.number_input("Missed Assignments", 0, value=0)
    late_assignments = st.number_input("Late Assignments", 0, value=0)
    absences_last_year = st.number_input("Absences Last Year", 0, value=0)
    counselor_visits = st.number_input("Counselor Visits", 0, value=0)
    submitted = st.form_submit_button("Submit")

if submitted:
    try:
        added = pipeline.submit(
            {
                "name": name,
                "grade": grade,
                "attendance": attendance,
                "gpa": gpa,
                "missed_assignments": missed_assignments,
                "behavior_incidents": behavior_incidents,
                "counselor_visits": counselor_visits,
                "extracurricular_activities": extracurricular_activities,
                "parent_involvement": parent_involvement,
                "previous_year_gpa": previous_year_gpa,
                "reading_score": reading_score,
                "math_score": math_score,
                "science_score": science_score,
                "absences_last_year": absences_last_year,
                "late_assignments": late_assignments,
                "study_group_participation": study_group_participation,
                "tutoring_sessions": tutoring_sessions,
                "mental_health_score": mental_health_score,
                "peer_relationships_score": peer_relationships_score,
            }
        )
        st.sidebar.success(f"Added {added.student_id} ({added.risk_level} risk).")
    except (MalformedInputError, ValidationError, PersistenceError) as e:
        _report(e)

upload = st.sidebar.file_uploader("Or upload intake CSV / JSON", type=["csv", "json"])
if upload is not None and st.sidebar.button("Import file"):
    try:
        text = decode_payload(upload.getvalue())
        if upload.name.lower().endswith(".json"):
            added_many = pipeline.submit_batch(text)
        else:
            added_many = pipeline.submit_csv(text)
        st.sidebar.success(f"Imported {len(added_many)} students.")
    except (MalformedInputError, ValidationError, PersistenceError) as e:
        _report(e)


# ---------------------------------------------------------------------
# Summary cards
# ---------------------------------------------------------------------
if len(store) == 0:
    st.info("No students yet. Add one from the sidebar or upload an intake file.")
    st.stop()

metrics = summarize(store.students)

cols = st.columns(3)
for col, level in zip(cols, (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)):
    col.metric(f"Students at {level.value} Risk", metrics["risk_levels"][level.value])

c1, c2, c3 = st.columns(3)
with c1:
    st.subheader("Academic Performance")
    st.write(f"Average Percentage: {metrics['avg_percentage']:.1f}%")
    st.write(f"Below 60%: {metrics['below_60_percent']}")
    st.write(f"Missing Assignments: {metrics['missed_assignments']}")
with c2:
    st.subheader("Behavioral Analysis")
    st.write(f"Attendance Rate: {metrics['avg_attendance']:.1f}%")
    st.write(f"Total Incidents: {metrics['behavior_incidents']}")
    st.write(f"Avg Mental Health: {metrics['avg_mental_health']:.1f}/5")
with c3:
    st.subheader("Support Network")
    st.write(f"Avg Parent Involvement: {metrics['avg_parent_involvement']:.1f}/5")
    st.write(f"Extracurricular Activities: {metrics['extracurricular_activities']}")


# ---------------------------------------------------------------------
# Student table + distribution
# ---------------------------------------------------------------------
level = st.radio("Risk level", ["All"] + [lv.value for lv in RiskLevel], horizontal=True)
shown = pd.DataFrame([s.to_dict() for s in store.filter_by_level(level)])

col1, col2 = st.columns([2, 1])

with col1:
    st.subheader("Students")
    table_cols = ["student_id", "name", "grade", "percentage", "attendance", "riskScore", "riskLevel"]
    if shown.empty:
        st.write("No students at this level.")
    else:
        st.dataframe(shown[table_cols], use_container_width=True)
    with st.expander("Column descriptions"):
        st.write({c: DATA_DICTIONARY[c] for c in table_cols})

with col2:
    st.subheader("Risk Distribution")
    fig = plt.figure()
    plt.hist(store.to_frame()["riskScore"], bins=20)
    plt.title("Risk Score Distribution")
    plt.xlabel("riskScore")
    plt.ylabel("count")
    st.pyplot(fig)


# ---------------------------------------------------------------------
# Student details
# ---------------------------------------------------------------------
st.subheader("Student details")

selected_id = st.selectbox("Student", store.student_ids())
student = store.get(selected_id)

if student is not None:
    st.write(f"**{student.name}**, grade {student.grade}: risk score {student.risk_score} ({student.risk_level})")
    trend = quarterly_trend(student).set_index("quarter")

    fig2, ax = plt.subplots()
    ax.plot(trend.index, trend["percentage"], marker="o", label="percentage")
    ax.plot(trend.index, trend["attendance"], marker="o", label="attendance")
    ax.set_ylim(0, 100)
    ax.legend()
    st.pyplot(fig2)

    fig3, ax3 = plt.subplots()
    ax3.bar(trend.index, trend["behavior_incidents"])
    ax3.set_title("Behavior incidents per quarter")
    st.pyplot(fig3)
