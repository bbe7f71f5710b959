# services/assessment_management/models/assessments.py
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Enum, ForeignKey, UniqueConstraint, Index, CheckConstraint
from sqlalchemy.orm import relationship
from shared.db import Base, utcnow
import enum


class AssessmentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes-requested"


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    week_number = Column(Integer, nullable=False)
    summary = Column(Text, nullable=False)
    status = Column(
        Enum(AssessmentStatus, values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=AssessmentStatus.PENDING,
    )
    headteacher_comment = Column(Text, nullable=True)
    assessment_file = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    student = relationship("Student")
    teacher = relationship("User")
    subject_assessments = relationship(
        "SubjectAssessment",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="SubjectAssessment.subject_id",
    )

    __table_args__ = (
        CheckConstraint("week_number > 0", name="ck_assessment_week_positive"),
        Index("idx_assessment_status", "status"),
        Index("idx_assessment_student_week", "student_id", "week_number"),
        Index("idx_assessment_teacher", "teacher_id"),
    )


class SubjectAssessment(Base):
    __tablename__ = "subject_assessments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    comment = Column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("assessment_id", "subject_id", name="uq_subject_assessment"),
    )

    assessment = relationship("Assessment", back_populates="subject_assessments")
    subject = relationship("Subject")
