from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from typing import List, Optional
from ..schemas import User, Student, StudentCreate
from ..storage import Storage, get_storage
from ..core import activity
from ..core.activity import record_activity
from ..core.permissions import get_current_user

router = APIRouter(prefix="/api", tags=["students"])


@router.get("/students", response_model=List[Student])
def get_students(
    parent_id: Optional[int] = None,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Get all students, or the children of one parent"""
    return storage.get_students(parent_id)


@router.get("/students/{student_id}", response_model=Student)
def get_student(
    student_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    student = storage.get_student(student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.post("/students", response_model=Student, status_code=status.HTTP_201_CREATED)
def create_student(
    student: StudentCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Create a new student"""
    db_student = storage.create_student(student)
    background_tasks.add_task(
        record_activity, storage, activity.CREATE_STUDENT, {"student_id": db_student.id}, current_user.id
    )
    return db_student


@router.put("/students/{student_id}", response_model=Student)
def update_student(
    student_id: int,
    student: StudentCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    db_student = storage.update_student(student_id, student.model_dump(exclude_unset=True))
    if not db_student:
        raise HTTPException(status_code=404, detail="Student not found")

    background_tasks.add_task(
        record_activity, storage, activity.UPDATE_STUDENT, {"student_id": student_id}, current_user.id
    )
    return db_student


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: int,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user)
):
    """Delete a student with its round assignments and absences"""
    if not storage.get_student(student_id):
        raise HTTPException(status_code=404, detail="Student not found")

    storage.delete_student(student_id)

    background_tasks.add_task(
        record_activity, storage, activity.DELETE_STUDENT, {"student_id": student_id}, current_user.id
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
