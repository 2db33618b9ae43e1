from typing import Any, Optional
import datetime
import uuid

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKeyConstraint, Index, Integer, PrimaryKeyConstraint, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from app.libs.formats.datetime import now as get_now


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint('coins >= 0', name='users_coins_non_negative'),
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key'),
        UniqueConstraint('username', name='users_username_key'),
        Index('idx_users_rating', 'rating'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    avatar: Mapped[Optional[str]] = mapped_column(String)
    english_level: Mapped[str] = mapped_column(String(32), nullable=False, default='beginner')
    age: Mapped[Optional[int]] = mapped_column(Integer)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_teacher: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now, onupdate=get_now)

    courses: Mapped[list['Courses']] = relationship('Courses', back_populates='teacher')


class UserFriends(Base):
    __tablename__ = 'user_friends'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='user_friends_user_id_fkey'),
        ForeignKeyConstraint(['friend_id'], ['users.id'], ondelete='CASCADE', name='user_friends_friend_id_fkey'),
        PrimaryKeyConstraint('user_id', 'friend_id', name='user_friends_pkey'),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    friend_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class Courses(Base):
    __tablename__ = 'courses'
    __table_args__ = (
        CheckConstraint('price >= 0', name='courses_price_non_negative'),
        ForeignKeyConstraint(['teacher_id'], ['users.id'], name='courses_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='courses_pkey'),
        Index('idx_courses_listing', 'is_active', 'is_approved', 'created_at'),
        Index('idx_courses_teacher', 'teacher_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    level: Mapped[Optional[str]] = mapped_column(String(32))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    image: Mapped[Optional[str]] = mapped_column(String)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now, onupdate=get_now)

    teacher: Mapped['User'] = relationship('User', back_populates='courses')
    lessons: Mapped[list['Lessons']] = relationship('Lessons', back_populates='course', order_by='Lessons.order_index', cascade='all', passive_deletes=True)
    quizzes: Mapped[list['Quizzes']] = relationship('Quizzes', back_populates='course', cascade='all', passive_deletes=True)


class Lessons(Base):
    __tablename__ = 'lessons'
    __table_args__ = (
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='lessons_course_id_fkey'),
        PrimaryKeyConstraint('id', name='lessons_pkey'),
        UniqueConstraint('course_id', 'order_index', name='lessons_course_order_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    video_url: Mapped[Optional[str]] = mapped_column(String)
    content: Mapped[Optional[str]] = mapped_column(Text)
    materials: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    duration: Mapped[Optional[int]] = mapped_column(Integer)

    course: Mapped['Courses'] = relationship('Courses', back_populates='lessons')


class Quizzes(Base):
    __tablename__ = 'quizzes'
    __table_args__ = (
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='quizzes_course_id_fkey'),
        ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='SET NULL', name='quizzes_lesson_id_fkey'),
        PrimaryKeyConstraint('id', name='quizzes_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)

    course: Mapped['Courses'] = relationship('Courses', back_populates='quizzes')
    questions: Mapped[list['QuizQuestions']] = relationship('QuizQuestions', back_populates='quiz', order_by='QuizQuestions.order_index', cascade='all', passive_deletes=True)


class QuizQuestions(Base):
    __tablename__ = 'quiz_questions'
    __table_args__ = (
        ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE', name='quiz_questions_quiz_id_fkey'),
        PrimaryKeyConstraint('id', name='quiz_questions_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    correct_answer: Mapped[int] = mapped_column(Integer, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    quiz: Mapped['Quizzes'] = relationship('Quizzes', back_populates='questions')


class CourseStudents(Base):
    __tablename__ = 'course_students'
    __table_args__ = (
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='course_students_course_id_fkey'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='course_students_user_id_fkey'),
        PrimaryKeyConstraint('id', name='course_students_pkey'),
        UniqueConstraint('course_id', 'user_id', name='course_students_unique'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    enrolled_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class CourseLikes(Base):
    __tablename__ = 'course_likes'
    __table_args__ = (
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='course_likes_course_id_fkey'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='course_likes_user_id_fkey'),
        PrimaryKeyConstraint('course_id', 'user_id', name='course_likes_pkey'),
    )

    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class CourseComments(Base):
    __tablename__ = 'course_comments'
    __table_args__ = (
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='course_comments_course_id_fkey'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='course_comments_user_id_fkey'),
        ForeignKeyConstraint(['parent_id'], ['course_comments.id'], ondelete='CASCADE', name='course_comments_parent_id_fkey'),
        PrimaryKeyConstraint('id', name='course_comments_pkey'),
        Index('idx_course_comments_course', 'course_id', 'created_at'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class CommentLikes(Base):
    __tablename__ = 'comment_likes'
    __table_args__ = (
        ForeignKeyConstraint(['comment_id'], ['course_comments.id'], ondelete='CASCADE', name='comment_likes_comment_id_fkey'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='comment_likes_user_id_fkey'),
        PrimaryKeyConstraint('comment_id', 'user_id', name='comment_likes_pkey'),
    )

    comment_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class Progress(Base):
    __tablename__ = 'progress'
    __table_args__ = (
        CheckConstraint('progress >= 0 AND progress <= 100', name='progress_percent_range'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='progress_user_id_fkey'),
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='progress_course_id_fkey'),
        ForeignKeyConstraint(['current_lesson_id'], ['lessons.id'], ondelete='SET NULL', name='progress_current_lesson_id_fkey'),
        PrimaryKeyConstraint('id', name='progress_pkey'),
        UniqueConstraint('user_id', 'course_id', name='progress_user_course_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    current_lesson_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_accessed: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class ProgressLessons(Base):
    __tablename__ = 'progress_completed_lessons'
    __table_args__ = (
        ForeignKeyConstraint(['progress_id'], ['progress.id'], ondelete='CASCADE', name='progress_completed_lessons_progress_id_fkey'),
        ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE', name='progress_completed_lessons_lesson_id_fkey'),
        PrimaryKeyConstraint('progress_id', 'lesson_id', name='progress_completed_lessons_pkey'),
    )

    progress_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    lesson_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    completed_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class QuizResults(Base):
    __tablename__ = 'quiz_results'
    __table_args__ = (
        ForeignKeyConstraint(['progress_id'], ['progress.id'], ondelete='CASCADE', name='quiz_results_progress_id_fkey'),
        ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE', name='quiz_results_quiz_id_fkey'),
        PrimaryKeyConstraint('id', name='quiz_results_pkey'),
        UniqueConstraint('progress_id', 'quiz_id', name='quiz_results_progress_quiz_key'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    progress_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    quiz_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    total_questions: Mapped[int] = mapped_column(Integer, nullable=False)
    answers: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    completed_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class Payments(Base):
    __tablename__ = 'payments'
    __table_args__ = (
        CheckConstraint("type IN ('course_purchase', 'premium_subscription')", name='payments_type_check'),
        CheckConstraint("status IN ('pending', 'completed', 'failed')", name='payments_status_check'),
        CheckConstraint('amount > 0', name='payments_amount_positive'),
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='payments_user_id_fkey'),
        ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE', name='payments_course_id_fkey'),
        PrimaryKeyConstraint('id', name='payments_pkey'),
        Index('idx_payments_created', 'status', 'created_at'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default='completed')
    course_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class Messages(Base):
    __tablename__ = 'messages'
    __table_args__ = (
        CheckConstraint('coins >= 0', name='messages_coins_non_negative'),
        ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE', name='messages_sender_id_fkey'),
        ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE', name='messages_receiver_id_fkey'),
        PrimaryKeyConstraint('id', name='messages_pkey'),
        Index('idx_messages_pair', 'sender_id', 'receiver_id', 'created_at'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    receiver_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    text: Mapped[Optional[str]] = mapped_column(Text)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)


class AdminAuditLogs(Base):
    __tablename__ = 'admin_audit_logs'
    __table_args__ = (
        ForeignKeyConstraint(['admin_id'], ['users.id'], ondelete='SET NULL', name='admin_audit_logs_admin_id_fkey'),
        PrimaryKeyConstraint('id', name='admin_audit_logs_pkey'),
        Index('idx_admin_audit_logs_entity', 'entity_type', 'entity_id'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    admin_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid)
    changes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=get_now)
