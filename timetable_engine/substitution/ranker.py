# timetable_engine/substitution/ranker.py

"""
Substitute Ranker - ranks and assigns substitute teachers for lessons left
uncovered by an absence.

Candidates are active teachers who volunteer for substitution plus the
lesson's co-teachers. Teachers already teaching a regular lesson at the slot,
or already at their weekly substitution limit, are excluded; co-teachers are
exempt from both checks. Every remaining candidate is scored additively and
the list is returned best first.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
from datetime import date, timedelta

from ..config import SchedulingEngineConfig, config as default_config, get_logger
from ..core.problem_model import (
    Lesson,
    ScheduledLesson,
    SchedulingProblem,
    Teacher,
    Weekday,
)
from ..utils.logging import SchedulingPhase, get_logger as get_scheduling_logger
from .models import Absence, AbsenceStatus, SubstituteCandidate, Substitution

logger = get_logger("substitution.ranker")


def week_start(reference: date) -> date:
    """The Sunday on or before the reference date."""
    return reference - timedelta(days=(reference.weekday() + 1) % 7)


class SubstituteRanker:
    """
    Ranks substitutes against a published timetable.

    The ranker keeps its own working list of substitutions; assignments made
    through it are appended there and count towards later rankings.
    """

    def __init__(
        self,
        problem: SchedulingProblem,
        schedule: Sequence[ScheduledLesson],
        substitutions: Iterable[Substitution] = (),
        config: Optional[SchedulingEngineConfig] = None,
        reference_date: Optional[date] = None,
    ):
        self.problem = problem
        self.schedule = list(schedule)
        self.substitutions: List[Substitution] = list(substitutions)
        self.config = config or default_config
        self.settings = self.config.substitution
        self.reference_date = reference_date or date.today()

    # Lookups

    def _subject_codes(self, lesson: Lesson) -> List[str]:
        return [
            s.code.strip().lower()
            for s in lesson.subjects
            if s.code and s.code.strip()
        ]

    def _teaching_at(
        self, teacher_id: int, day: Weekday, period_id: int
    ) -> List[ScheduledLesson]:
        return [
            sl
            for sl in self.schedule
            if sl.day == day and sl.period_id == period_id and sl.lesson.has_teacher(teacher_id)
        ]

    def is_busy(self, teacher_id: int, day: Weekday, period_id: int) -> bool:
        """Teaching a regular lesson, anything but reserve duty, at the slot."""
        reserve = self.settings.reserve_subject_code.lower()
        return any(
            code != reserve
            for sl in self._teaching_at(teacher_id, day, period_id)
            for code in self._subject_codes(sl.lesson)
        )

    def is_on_reserve(self, teacher_id: int, day: Weekday, period_id: int) -> bool:
        reserve = self.settings.reserve_subject_code.lower()
        return any(
            code == reserve
            for sl in self._teaching_at(teacher_id, day, period_id)
            for code in self._subject_codes(sl.lesson)
        )

    def is_substituting_at(self, teacher_id: int, day: Weekday, period_id: int) -> bool:
        return any(
            s.substitute_teacher_id == teacher_id
            and s.scheduled_lesson.day == day
            and s.scheduled_lesson.period_id == period_id
            for s in self.substitutions
        )

    def substitutions_this_week(self, teacher_id: int) -> int:
        start = week_start(self.reference_date)
        return sum(
            1
            for s in self.substitutions
            if s.substitute_teacher_id == teacher_id and s.date >= start
        )

    def _month_substitutions(self, teacher_id: int) -> List[Substitution]:
        start = self.reference_date.replace(day=1)
        return [
            s
            for s in self.substitutions
            if s.substitute_teacher_id == teacher_id and s.date >= start
        ]

    def substitutions_this_month(self, teacher_id: int) -> int:
        return len(self._month_substitutions(teacher_id))

    def hours_this_month(self, teacher_id: int) -> float:
        return sum((s.hours_worked for s in self._month_substitutions(teacher_id)), 0.0)

    def previous_substitutions_in_subject(
        self, teacher_id: int, subject_id: Optional[int]
    ) -> int:
        if subject_id is None:
            return 0
        return sum(
            1
            for s in self.substitutions
            if s.substitute_teacher_id == teacher_id
            and s.scheduled_lesson.lesson.has_subject(subject_id)
        )

    def _weekly_limit(self, teacher: Teacher) -> int:
        if teacher.max_substitutions_per_week is not None:
            return teacher.max_substitutions_per_week
        return self.settings.default_max_substitutions_per_week

    def _at_weekly_limit(self, teacher: Teacher) -> bool:
        return self.substitutions_this_week(teacher.id) >= self._weekly_limit(teacher)

    # Ranking

    def _candidate_pool(self, absent_teacher_id: int, lesson: Lesson) -> List[Teacher]:
        pool = [
            t for t in self.problem.teachers if t.is_active and t.available_for_substitution
        ]
        pool_ids = {t.id for t in pool}
        for co_teacher in lesson.teachers:
            if co_teacher.id == absent_teacher_id or not co_teacher.is_active:
                continue
            if co_teacher.id not in pool_ids:
                pool.append(co_teacher)
                pool_ids.add(co_teacher.id)
        return pool

    def rank_substitutes(
        self, absent_teacher_id: int, scheduled_lesson: ScheduledLesson
    ) -> List[SubstituteCandidate]:
        lesson = scheduled_lesson.lesson
        day, period_id = scheduled_lesson.day, scheduled_lesson.period_id
        subject = lesson.primary_subject
        absent_teacher = self.problem.get_teacher(absent_teacher_id)
        co_teacher_ids = {
            t.id for t in lesson.teachers if t.id != absent_teacher_id and t.is_active
        }

        candidates: List[SubstituteCandidate] = []
        for teacher in self._candidate_pool(absent_teacher_id, lesson):
            if teacher.id == absent_teacher_id:
                continue

            is_co_teacher = teacher.id in co_teacher_ids
            if not is_co_teacher:
                if self.is_busy(teacher.id, day, period_id):
                    continue
                if self._at_weekly_limit(teacher):
                    continue

            candidate = self._score(
                teacher, absent_teacher, subject, day, period_id, is_co_teacher
            )
            if candidate is not None:
                candidates.append(candidate)

        candidates.sort(
            key=lambda c: (-c.score, c.substitutions_this_week, not c.is_qualified)
        )
        logger.info(
            f"Ranked {len(candidates)} substitute candidates for lesson "
            f"{scheduled_lesson.lesson_id}, top score: "
            f"{candidates[0].score if candidates else 0}"
        )
        return candidates

    def _score(
        self,
        teacher: Teacher,
        absent_teacher: Optional[Teacher],
        subject,
        day: Weekday,
        period_id: int,
        is_co_teacher: bool,
    ) -> Optional[SubstituteCandidate]:
        """Additive score, or None when a reserve teacher is already covering the slot."""
        s = self.settings
        score = 0
        reasons: List[str] = []

        if is_co_teacher:
            score += s.co_teacher_points
            reasons.append("Co-teacher already teaching this lesson")

        on_reserve = self.is_on_reserve(teacher.id, day, period_id)
        if on_reserve:
            if self.is_substituting_at(teacher.id, day, period_id):
                return None
            score += s.reserve_duty_points
            reasons.append("On substitution reserve at this time")

        is_qualified = subject is not None and subject.id in teacher.qualified_subject_ids
        if is_qualified:
            score += s.qualified_points
            reasons.append(f"Qualified to teach {subject.name}")
        elif teacher.substitution_qualification_notes and teacher.substitution_qualification_notes.strip():
            score += s.informal_qualification_points
            reasons.append(
                f"Has informal qualifications: {teacher.substitution_qualification_notes}"
            )

        is_same_department = (
            absent_teacher is not None
            and teacher.department_id is not None
            and absent_teacher.department_id is not None
            and teacher.department_id == absent_teacher.department_id
        )
        if is_same_department:
            score += s.same_department_points
            reasons.append(f"Same department as {absent_teacher.full_name}")

        this_week = self.substitutions_this_week(teacher.id)
        workload = max(0, s.workload_points - s.workload_step * this_week)
        score += workload
        if workload > s.workload_points // 2:
            reasons.append(f"Low workload ({this_week} substitutions this week)")
        elif workload > 0:
            reasons.append(f"Moderate workload ({this_week} substitutions this week)")

        score += s.availability_points
        reasons.append("Available at this time")

        previous = self.previous_substitutions_in_subject(
            teacher.id, subject.id if subject else None
        )
        if previous > 0:
            score += min(
                s.max_experience_points, previous * s.experience_points_per_substitution
            )
            reasons.append(f"Previously substituted {previous}x in this subject")

        return SubstituteCandidate(
            teacher=teacher,
            score=score,
            reasons=tuple(reasons),
            is_qualified=is_qualified,
            is_same_department=is_same_department,
            is_co_teacher=is_co_teacher,
            is_on_reserve=on_reserve,
            substitutions_this_week=this_week,
            substitutions_this_month=self.substitutions_this_month(teacher.id),
            hours_this_month=self.hours_this_month(teacher.id),
        )

    # Workflow

    def find_available_substitutes(self, day: Weekday, period_id: int) -> List[Teacher]:
        available = [
            t
            for t in self.problem.teachers
            if t.is_active
            and t.available_for_substitution
            and not self.is_busy(t.id, day, period_id)
            and not self._at_weekly_limit(t)
        ]
        logger.info(
            f"Found {len(available)} available substitutes for {Weekday(day).label} "
            f"period {period_id}"
        )
        return available

    def affected_lessons(self, absence: Absence) -> List[ScheduledLesson]:
        """The absent teacher's lessons on the absence weekday, within its time window."""
        affected = [
            sl
            for sl in self.schedule
            if sl.day == absence.weekday and sl.lesson.has_teacher(absence.teacher_id)
        ]
        if absence.is_partial:
            affected = [
                sl
                for sl in affected
                if (period := self.problem.get_period(sl.period_id)) is not None
                and period.overlaps(absence.start_time, absence.end_time)
            ]
        logger.info(
            f"Found {len(affected)} affected lessons for absence of teacher "
            f"{absence.teacher_id} on {absence.weekday.label}"
        )
        return affected

    def substitutions_for(self, absence: Absence) -> List[Substitution]:
        return [s for s in self.substitutions if s.absence.is_same_absence(absence)]

    def absence_status(self, absence: Absence) -> AbsenceStatus:
        covered = len(self.substitutions_for(absence))
        if covered == 0:
            return AbsenceStatus.REPORTED
        if covered < len(self.affected_lessons(absence)):
            return AbsenceStatus.PARTIALLY_COVERED
        return AbsenceStatus.COVERED

    def assign(
        self,
        absence: Absence,
        scheduled_lesson: ScheduledLesson,
        substitute_teacher_id: Optional[int],
        notes: Optional[str] = None,
    ) -> Substitution:
        period = self.problem.get_period(scheduled_lesson.period_id)
        substitution = Substitution(
            absence=absence,
            scheduled_lesson=scheduled_lesson,
            substitute_teacher_id=substitute_teacher_id,
            notes=notes,
            hours_worked=period.duration_hours if period else 0.0,
        )
        self.substitutions.append(substitution)
        absence.status = self.absence_status(absence)
        get_scheduling_logger().increment_counter("substitutions_assigned")
        logger.info(
            f"Assigned substitute {substitute_teacher_id} to lesson "
            f"{scheduled_lesson.lesson_id} for absence of teacher {absence.teacher_id}"
        )
        return substitution

    def auto_assign_best(
        self,
        absence: Absence,
        scheduled_lesson: ScheduledLesson,
        minimum_score: Optional[int] = None,
    ) -> Optional[Substitution]:
        if minimum_score is None:
            minimum_score = self.settings.minimum_score

        ranked = self.rank_substitutes(absence.teacher_id, scheduled_lesson)
        best = ranked[0] if ranked else None
        if best is None or best.score < minimum_score:
            logger.warning(
                f"No suitable substitute found for lesson {scheduled_lesson.lesson_id} "
                f"(minimum score: {minimum_score})"
            )
            return None

        return self.assign(
            absence,
            scheduled_lesson,
            best.teacher.id,
            notes=f"Auto-assigned (match score: {best.score})",
        )

    def auto_assign_all(
        self, absence: Absence, minimum_score: Optional[int] = None
    ) -> Tuple[int, int]:
        """Cover every affected lesson that has no substitution yet."""
        structured = get_scheduling_logger()
        with structured.phase_context(
            SchedulingPhase.SUBSTITUTION, {"teacher_id": absence.teacher_id}
        ):
            covered = [s.scheduled_lesson for s in self.substitutions_for(absence)]
            uncovered = [
                sl
                for sl in self.affected_lessons(absence)
                if not any(sl.is_same_placement(c) or sl == c for c in covered)
            ]

            assigned = failed = 0
            for scheduled_lesson in uncovered:
                if self.auto_assign_best(absence, scheduled_lesson, minimum_score):
                    assigned += 1
                else:
                    failed += 1

        logger.info(
            f"Auto-assignment for absence of teacher {absence.teacher_id}: "
            f"{assigned} assigned, {failed} failed"
        )
        return assigned, failed

