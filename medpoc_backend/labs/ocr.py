"""
Mock OCR for uploaded lab reports.

No real OCR engine is involved: an accepted upload is mapped to a canned
report text (full panel for PDFs, short panel for images) and the text is run
through the same extraction a real OCR result would go through.

Extraction works line by line. Header fields (test type, date, ordering
physician, lab) are matched with English and Spanish labels; result rows
look like ``<parameter> <value> <unit> (<reference range>)``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from django.conf import settings
from rest_framework import status

from medpoc_backend.core.exceptions import PracticeError

logger = logging.getLogger(__name__)


ALLOWED_CONTENT_TYPES = frozenset(
    {
        'application/pdf',
        'image/png',
        'image/jpeg',
        'image/jpg',
    }
)

MOCK_CONFIDENCE = 85

PDF_MOCK_TEXT = """
    LABORATORY REPORT
    Patient: John Doe
    Date: 12/15/2024
    Ordering Physician: Dr. Smith
    Laboratory: City Medical Lab

    Test Results:
    Glucose 95 mg/dL (70-100)
    Cholesterol 180 mg/dL (<200)
    HDL 45 mg/dL (>40)
    LDL 110 mg/dL (<100)
    Triglycerides 150 mg/dL (<150)
    Hemoglobin 14.2 g/dL (12-16)
    Hematocrit 42% (36-46)
    WBC 7.2 K/uL (4.5-11.0)
    RBC 4.8 M/uL (4.0-5.2)
    Platelets 250 K/uL (150-450)
    Sodium 140 mEq/L (136-145)
    Potassium 4.2 mEq/L (3.5-5.0)
    Chloride 102 mEq/L (98-107)
    BUN 15 mg/dL (7-20)
    Creatinine 1.0 mg/dL (0.6-1.2)
"""

IMAGE_MOCK_TEXT = """
    LAB RESULTS
    Date: 12/15/2024
    Dr. Smith
    City Medical Lab

    Glucose: 95 mg/dL (70-100)
    Cholesterol: 180 mg/dL (<200)
    HDL: 45 mg/dL (>40)
    LDL: 110 mg/dL (<100)
    Triglycerides: 150 mg/dL (<150)
"""


TEST_TYPE_PATTERNS = [
    re.compile(r'(?:test type|test name|examination|procedure):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:blood test|lab test|laboratory test|clinical test):\s*([^\n\r]+)', re.I),
    re.compile(
        r'(?:complete blood count|cbc|basic metabolic panel|bmp|comprehensive metabolic panel|cmp'
        r'|lipid panel|thyroid panel)',
        re.I,
    ),
    re.compile(r'(?:chemistry panel|chemistry profile|metabolic panel)', re.I),
    re.compile(r'(?:tipo de prueba|nombre de prueba|examen|procedimiento):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:prueba de sangre|prueba de laboratorio|prueba clínica):\s*([^\n\r]+)', re.I),
    re.compile(
        r'(?:hemograma completo|biometría hemática|perfil metabólico básico|perfil lipídico|perfil tiroideo)',
        re.I,
    ),
    re.compile(r'(?:panel de química|perfil de química|perfil metabólico)', re.I),
]

_DATE_LABELS_EN = r'(?:date|collected|drawn|specimen date)'
_DATE_LABELS_ES = r'(?:fecha|recolectado|extraído|fecha de muestra)'

DATE_PATTERNS = [
    re.compile(_DATE_LABELS_EN + r':\s*(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})', re.I),
    re.compile(_DATE_LABELS_EN + r':\s*(\d{4}[/\-]\d{1,2}[/\-]\d{1,2})', re.I),
    re.compile(_DATE_LABELS_EN + r':\s*([a-zA-Z]+\s+\d{1,2},?\s+\d{4})', re.I),
    re.compile(_DATE_LABELS_ES + r':\s*(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})', re.I),
    re.compile(_DATE_LABELS_ES + r':\s*(\d{4}[/\-]\d{1,2}[/\-]\d{1,2})', re.I),
    re.compile(_DATE_LABELS_ES + r':\s*([a-zA-Záéíóúñ]+\s+\d{1,2},?\s+\d{4})', re.I),
    re.compile(r'(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})'),
    re.compile(r'(\d{4}[/\-]\d{1,2}[/\-]\d{1,2})'),
    re.compile(r'([a-zA-Záéíóúñ]+\s+\d{1,2},?\s+\d{4})'),
]

PHYSICIAN_PATTERNS = [
    re.compile(r'(?:ordering physician|ordering doctor|physician|doctor|dr\.?):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:ordered by|requested by|attending):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:signature|signed by):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:médico ordenante|doctor ordenante|médico|doctor|dr\.?):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:ordenado por|solicitado por|médico tratante):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:firma|firmado por):\s*([^\n\r]+)', re.I),
]

LAB_PATTERNS = [
    re.compile(r'(?:performing lab|laboratory|facility|lab):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:performed at|analyzed at|processed at):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:reporting lab|reporting laboratory):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:laboratorio ejecutor|laboratorio|instalación|lab):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:realizado en|analizado en|procesado en):\s*([^\n\r]+)', re.I),
    re.compile(r'(?:laboratorio reportante|laboratorio de reporte):\s*([^\n\r]+)', re.I),
]

COMMON_PARAMETERS = (
    'glucose', 'cholesterol', 'hdl', 'ldl', 'triglycerides', 'hemoglobin',
    'hematocrit', 'wbc', 'rbc', 'platelets', 'sodium', 'potassium', 'chloride',
    'bun', 'creatinine', 'alt', 'ast', 'alkaline phosphatase', 'bilirubin',
    'protein', 'albumin', 'calcium', 'phosphorus', 'magnesium', 'co2',
    'anion gap', 'osmolality', 'urea', 'uric acid',
    'glucosa', 'colesterol', 'triglicéridos', 'hemoglobina', 'hematocrito',
    'leucocitos', 'glóbulos blancos', 'eritrocitos', 'glóbulos rojos',
    'plaquetas', 'sodio', 'potasio', 'cloruro', 'nitrógeno ureico',
    'creatinina', 'fosfatasa alcalina', 'bilirrubina', 'proteína', 'albúmina',
    'calcio', 'fósforo', 'magnesio', 'brecha aniónica', 'osmolalidad',
    'ácido úrico',
)

NUMERIC_VALUE_RE = re.compile(r'\d+\.?\d*\s*[a-zA-Z%/]*\s*(?:\([^)]+\))?')

# "<parameter>[:] <value> <unit> (<range>)"; a value followed by /12 or -12 is a date
RESULT_RE = re.compile(
    r'([a-zA-Z\s\-]+?):?\s+([\d.]+)(?![\d.]*[/\-]\d)\s*([a-zA-Z%/]*)\s*(?:\(([^)]+)\))?'
)

RANGE_RE = re.compile(r'(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)')
LESS_THAN_RE = re.compile(r'<(\d+(?:\.\d+)?)')
GREATER_THAN_RE = re.compile(r'>(\d+(?:\.\d+)?)')


class LabProcessingError(PracticeError):
    """The upload was rejected or nothing could be extracted from it."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = 'Failed to process file'


@dataclass
class LabResult:
    parameter: str
    value: str
    unit: str = ''
    reference_range: str = ''
    status: str = 'normal'

    def to_dict(self) -> dict[str, Any]:
        return {
            'parameter': self.parameter,
            'value': self.value,
            'unit': self.unit,
            'referenceRange': self.reference_range,
            'status': self.status,
        }


@dataclass
class ExtractedTestData:
    test_type: str | None = None
    test_date: str | None = None
    ordering_physician: str | None = None
    lab_name: str | None = None
    results: list[LabResult] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.results or self.test_type or self.test_date)

    def to_dict(self) -> dict[str, Any]:
        return {
            'testType': self.test_type,
            'testDate': self.test_date,
            'orderingPhysician': self.ordering_physician,
            'labName': self.lab_name,
            'results': [r.to_dict() for r in self.results],
        }


@dataclass
class LabProcessingResult:
    data: ExtractedTestData
    confidence: float
    raw_text: str


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def normalize_lines(text: str) -> list[str]:
    """Split into lines first, then collapse whitespace inside each line."""
    lines = (re.sub(r'\s+', ' ', line).strip() for line in text.splitlines())
    return [line for line in lines if line]


def _first_match(patterns, text: str) -> str | None:
    """Captured value of the first matching pattern (whole match when it has no group)."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            value = match.group(1) if match.groups() else match.group(0)
            return value.strip()
    return None


def classify(value: str, reference_range: str) -> str:
    """Derive normal / high / low from ranges like ``70-100``, ``<200``, ``>40``."""
    if not reference_range:
        return 'normal'

    try:
        number = float(value)
    except ValueError:
        return 'normal'

    match = RANGE_RE.search(reference_range)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        if number < low:
            return 'low'
        if number > high:
            return 'high'
        return 'normal'

    match = LESS_THAN_RE.search(reference_range)
    if match:
        return 'high' if number >= float(match.group(1)) else 'normal'

    match = GREATER_THAN_RE.search(reference_range)
    if match:
        return 'low' if number <= float(match.group(1)) else 'normal'

    return 'normal'


def _looks_like_result(line: str) -> bool:
    if len(line) < 3:
        return False
    lowered = line.lower()
    if any(param in lowered for param in COMMON_PARAMETERS):
        return True
    return bool(NUMERIC_VALUE_RE.search(line))


def extract_test_data(text: str) -> ExtractedTestData:
    lines = normalize_lines(text)
    clean_text = '\n'.join(lines)

    extracted = ExtractedTestData(
        test_type=_first_match(TEST_TYPE_PATTERNS, clean_text),
        test_date=_first_match(DATE_PATTERNS, clean_text),
        ordering_physician=_first_match(PHYSICIAN_PATTERNS, clean_text),
        lab_name=_first_match(LAB_PATTERNS, clean_text),
    )

    for line in lines:
        if not _looks_like_result(line):
            continue
        match = RESULT_RE.search(line)
        if not match:
            continue

        parameter = match.group(1).strip()
        if len(parameter) <= 2:
            continue

        value = match.group(2)
        reference_range = match.group(4) or ''
        extracted.results.append(
            LabResult(
                parameter=parameter,
                value=value,
                unit=match.group(3) or '',
                reference_range=reference_range,
                status=classify(value, reference_range),
            )
        )

    return extracted


# ---------------------------------------------------------------------------
# Upload processing
# ---------------------------------------------------------------------------

def mock_text_for(content_type: str) -> str:
    if content_type == 'application/pdf':
        return PDF_MOCK_TEXT
    if content_type.startswith('image/'):
        return IMAGE_MOCK_TEXT
    return ''


def process_lab_file(upload) -> LabProcessingResult:
    """Validate an uploaded lab report and extract its test data.

    Raises:
        LabProcessingError: unsupported type, too large, or nothing extracted
    """
    content_type = (getattr(upload, 'content_type', '') or '').lower()
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise LabProcessingError('Unsupported file type. Please upload PDF or image files.')

    max_bytes = settings.LAB_UPLOAD_MAX_BYTES
    if upload.size > max_bytes:
        raise LabProcessingError(
            f'File too large. Please upload files smaller than {max_bytes // (1024 * 1024)}MB.'
        )

    logger.info(
        'lab_ocr start name=%s type=%s size_kb=%.1f',
        getattr(upload, 'name', ''),
        content_type,
        upload.size / 1024,
    )

    raw_text = mock_text_for(content_type)
    data = extract_test_data(raw_text)

    if data.is_empty():
        raise LabProcessingError(
            'No test data could be extracted from the file. '
            'Please ensure the file contains readable lab results.'
        )

    logger.info('lab_ocr done results=%s test_date=%s', len(data.results), data.test_date)
    return LabProcessingResult(data=data, confidence=MOCK_CONFIDENCE / 100, raw_text=raw_text)
