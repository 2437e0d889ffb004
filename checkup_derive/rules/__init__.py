"""
Rules sub-package for checkup-derive.

Contains the derivation rules that turn raw questionnaire / lab strings
into derived variables, one module per rule family:

- base.py: BaseRule ABC (protocol) and shared numeric helpers.
- grammar.py: day-count, duration and category-to-score grammars.
- demographics.py: age, sex.
- history.py: disease/medication and family history flags.
- vitals.py: BMI, girth, blood pressure, body-composition pass-through.
- lifestyle.py: alcohol, smoking, betel/tea/coffee, diet, exercise.
- questionnaires.py: PSQI and BSRS-5 scores.
- labs.py: zero-discard lab values, urine glucose, hsCRP.
- imaging.py: Agatston calcium score from report text.

Design: Strategy Pattern
- Field specs reference rules by registry name (see rule_registry.py).
- The dispatcher only knows the BaseRule interface.
"""
