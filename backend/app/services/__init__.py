from app.services.parking_service import RecordResult, record_parking_report

__all__ = ["RecordResult", "record_parking_report"]
