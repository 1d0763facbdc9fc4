"""
Filter schemas for the admin console's entity lists.
"""

from listing.state.models import (
    CONTAINS,
    DATE_BEFORE,
    EXACT,
    SEARCH,
    FilterField,
    FilterSchema,
)

DOCTOR_FILTERS = FilterSchema([
    FilterField('search', SEARCH, paths=(
        'first_name_en', 'last_name_en', 'first_name_he', 'last_name_he',
        'license_number', 'email', 'specialties', 'sub_specialties', 'city', 'address',
    )),
    FilterField('specialty', CONTAINS, paths=('specialties', 'sub_specialties')),
    FilterField('city', EXACT, ignore_case=True),
    FilterField('status', EXACT),
])

PROVIDER_FILTERS = FilterSchema([
    FilterField('search', SEARCH, paths=(
        'name', 'legal.identifier', 'contact.contact_person_name',
        'contact.email', 'contact.phone', 'contact.city',
    )),
    FilterField('provider_type', EXACT),
    FilterField('city', EXACT, paths='contact.city', ignore_case=True),
    FilterField('status', EXACT),
])

TASK_FILTERS = FilterSchema([
    FilterField('search', SEARCH, paths=('title', 'description')),
    FilterField('status', EXACT),
    FilterField('priority', EXACT),
    FilterField('category', EXACT),
    FilterField('due_date', DATE_BEFORE),
])

MEDICAL_CODE_FILTERS = FilterSchema([
    FilterField('search', SEARCH, paths=('code', 'description_en', 'description_he', 'tags')),
    FilterField('code_system', EXACT),
    FilterField('status', EXACT),
    FilterField('tag', CONTAINS, paths='tags'),
])

ENTITY_SCHEMAS = {
    'doctors': DOCTOR_FILTERS,
    'providers': PROVIDER_FILTERS,
    'tasks': TASK_FILTERS,
    'medical_codes': MEDICAL_CODE_FILTERS,
}
