from models.subject import Subject
from models.class_section import ClassSection
from models.teacher import Teacher
from models.records import ResultRecord, AttendanceRecord
from models.university_data import UniversityData, ReadinessReport

__all__ = [
    "Subject",
    "ClassSection",
    "Teacher",
    "ResultRecord",
    "AttendanceRecord",
    "UniversityData",
    "ReadinessReport",
]
