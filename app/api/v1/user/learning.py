import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from app.core.deps import AuthorizationService
from app.schemas.user.learning import QuizSubmit
from app.services.user.learning import LearningService

router = APIRouter(tags=["Learning"])


@router.get("/courses/{course_id}/lessons/{lesson_id}")
async def get_lesson(
    course_id: uuid.UUID,
    lesson_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    learning_service: LearningService = Depends(LearningService),
):
    user = await authorization.get_current_user()
    return await learning_service.get_lesson_async(course_id, lesson_id, user.id)


@router.post("/courses/{course_id}/lessons/{lesson_id}/complete")
async def complete_lesson(
    course_id: uuid.UUID,
    lesson_id: uuid.UUID,
    authorization: AuthorizationService = Depends(AuthorizationService),
    learning_service: LearningService = Depends(LearningService),
):
    user = await authorization.get_current_user()
    return await learning_service.complete_lesson_async(course_id, lesson_id, user.id)


@router.post("/courses/{course_id}/quizzes/{quiz_id}/submit")
async def submit_quiz(
    course_id: uuid.UUID,
    quiz_id: uuid.UUID,
    schema: QuizSubmit = Body(...),
    authorization: AuthorizationService = Depends(AuthorizationService),
    learning_service: LearningService = Depends(LearningService),
):
    user = await authorization.get_current_user()
    return await learning_service.submit_quiz_async(
        course_id, quiz_id, user.id, schema.answers
    )


@router.get("/progress")
async def get_progress(
    user_id: Optional[uuid.UUID] = Query(None, description="Defaults to the caller"),
    authorization: AuthorizationService = Depends(AuthorizationService),
    learning_service: LearningService = Depends(LearningService),
):
    user = await authorization.get_current_user()
    return await learning_service.get_progress_list_async(user_id or user.id)
