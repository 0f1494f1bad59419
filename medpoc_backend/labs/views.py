from rest_framework import generics
from rest_framework.parsers import FormParser, MultiPartParser

from medpoc_backend.core.exceptions import InvalidPracticeData
from medpoc_backend.core.permissions import DoctorContextMixin
from medpoc_backend.core.utils import log_patient_action, success_response
from medpoc_backend.labs.ocr import process_lab_file


class LabOcrView(DoctorContextMixin, generics.GenericAPIView):
    """POST /api/ocr/ (multipart, field ``file``)

    Returns the extracted lab data with the OCR confidence and raw text.
    """

    parser_classes = [MultiPartParser, FormParser]
    failure_message = 'Failed to process file with server-side OCR'

    def post(self, request, *args, **kwargs):
        self.get_doctor_context()
        upload = request.FILES.get('file')
        if upload is None:
            raise InvalidPracticeData('No file provided', field='file')

        result = process_lab_file(upload)
        log_patient_action(
            request.user,
            'lab_ocr',
            meta={'content_type': upload.content_type, 'results': len(result.data.results)},
        )
        return success_response(
            result.data.to_dict(),
            confidence=result.confidence,
            rawText=result.raw_text,
        )
