"""
Dữ liệu mẫu (demo) cho dashboard. Chỉ đọc – app copy vào session_state.
"""
from datetime import date, datetime

from utils.documents import DocumentSOP
from utils.samples import Patient, Sample, SampleStatus


MOCK_PATIENTS = (
    Patient(id="P001", name="John Doe", dob=date(1985, 4, 12), mrn="MRN-8821", gender="Male"),
    Patient(id="P002", name="Jane Smith", dob=date(1992, 9, 23), mrn="MRN-9932", gender="Female"),
    Patient(id="P003", name="Robert Johnson", dob=date(1978, 1, 15), mrn="MRN-1120", gender="Male"),
    Patient(id="P004", name="Emily Davis", dob=date(1990, 11, 30), mrn="MRN-4451", gender="Female"),
)

MOCK_SAMPLES = (
    Sample(id="S001", patient_id="P001", sample_type="Whole Blood (EDTA)",
           collection_date=datetime(2023, 10, 26, 8, 30), status=SampleStatus.ANALYZED, barcode="8821-S01"),
    Sample(id="S002", patient_id="P002", sample_type="Serum",
           collection_date=datetime(2023, 10, 26, 9, 15), status=SampleStatus.PROCESSING, barcode="9932-S01"),
    Sample(id="S003", patient_id="P003", sample_type="Tissue Biopsy",
           collection_date=datetime(2023, 10, 26, 10, 0), status=SampleStatus.RECEIVED, barcode="1120-S01"),
    Sample(id="S004", patient_id="P004", sample_type="Urine",
           collection_date=datetime(2023, 10, 26, 11, 45), status=SampleStatus.COLLECTED, barcode="4451-S01"),
)


_VENIPUNCTURE_SOP = """1. PURPOSE
To establish a standard procedure for the safe and correct collection of blood samples via venipuncture.

2. SCOPE
This procedure applies to all phlebotomists, nurses, and laboratory personnel authorized to perform venipuncture.

3. MATERIALS & EQUIPMENT
- Tourniquet (single-use)
- Alcohol prep pads (70% Isopropyl alcohol)
- Vacutainer needles (21G or 22G)
- Vacutainer holder
- Specimen tubes (Lavender, Red, Blue top as required)
- Gauze pads
- Adhesive bandage
- Biohazard sharps container
- Gloves

4. PROCEDURE
4.1 Patient Identification
   - Ask the patient to state their full name and date of birth.
   - Verify against the requisition form and patient wristband (if inpatient).
   - Ensure at least two identifiers match.

4.2 Site Selection
   - Position the patient comfortably.
   - Inspect the antecubital fossa for a suitable vein (Median cubital, Cephalic, or Basilic).
   - Avoid areas with hematomas, scarring, or IV lines.

4.3 Preparation
   - Perform hand hygiene and don gloves.
   - Apply the tourniquet 3-4 inches above the site. Do not leave on for >1 minute.
   - Palpate the vein.
   - Cleanse the site with alcohol in a circular motion, moving outward. Allow to air dry for 30 seconds.

4.4 Puncture
   - Anchor the vein by pulling the skin taut below the site.
   - Insert the needle, bevel up, at a 15-30 degree angle.
   - Push the tube onto the needle within the holder. Ensure blood flows.
   - Release tourniquet as soon as blood flow is established.

4.5 Order of Draw
   1. Blood Culture (Yellow)
   2. Sodium Citrate (Blue)
   3. Serum Tubes (Red/Gold)
   4. Heparin (Green)
   5. EDTA (Lavender/Pink)
   6. Fluoride/Oxalate (Gray)

4.6 Completion
   - Remove the last tube.
   - Place gauze over the site and withdraw the needle swiftly.
   - Engage safety device on needle immediately.
   - Apply pressure to the site.

5. SAFETY PRECAUTIONS
- Dispose of all sharps immediately in sharps containers.
- Treat all blood as potentially infectious.
- If a needlestick injury occurs, wash the area immediately and report to supervisor."""

_CENTRIFUGE_SOP = """1. PURPOSE
To ensure the proper function and safety of laboratory centrifuges through regular maintenance.

2. FREQUENCY
- Daily: Visual inspection
- Weekly: Cleaning of rotor chamber
- Monthly: Calibration check

3. PROCEDURE
3.1 Daily Inspection
   - Check for physical damage to the lid or latch.
   - Ensure the centrifuge is balanced before every run.

3.2 Weekly Cleaning
   - Turn off and unplug the centrifuge.
   - Remove the buckets and adapters.
   - Clean the interior bowl with a 10% bleach solution or approved disinfectant.
   - Wipe down the exterior.
   - Allow all parts to dry completely before reassembly.

3.3 Monthly Calibration (Speed Check)
   - Use a calibrated tachometer.
   - Set centrifuge to 1000, 2000, and 3000 RPM.
   - Measure actual speed through the viewing port.
   - Tolerance: +/- 50 RPM.
   - Record results in the Equipment Maintenance Log.

4. TROUBLESHOOTING
- Vibration: Stop immediately. Check for load imbalance or loose rotor.
- Noise: Check for debris in the chamber."""

MOCK_DOCUMENTS = (
    DocumentSOP(
        id="DOC-001",
        title="Specimen Collection: Venipuncture",
        content=_VENIPUNCTURE_SOP,
        version="1.2",
        last_updated=date(2023, 9, 15),
        status="Approved",
    ),
    DocumentSOP(
        id="DOC-002",
        title="Centrifuge Maintenance",
        content=_CENTRIFUGE_SOP,
        version="1.0",
        last_updated=date(2023, 10, 1),
        status="Draft",
    ),
)

# Gợi ý nhanh cho form soạn SOP bằng AI: (label, title, context)
SOP_EXAMPLE_PROMPTS = (
    (
        "Daily Calibration",
        "Daily Hematology Analyzer Calibration",
        "Standard operating procedure for calibrating the Sysmex XN-1000. Must be performed daily "
        "before 08:00 AM. Include steps for running low, normal, and high controls. "
        "Require check of reagent levels.",
    ),
    (
        "Biohazard Spill",
        "Biohazard Spill Clean-up Procedure",
        "Protocol for managing blood or body fluid spills larger than 10mL. Specify PPE requirements "
        "(gown, gloves, face shield). Use 1:10 bleach solution. Include incident reporting steps.",
    ),
    (
        "Critical Values",
        "Reporting Critical Test Results",
        "Workflow for communicating life-threatening results (panic values) to clinicians. Must be "
        "reported within 15 minutes of verification. Requires 'read-back' confirmation from the "
        "provider. Log requirements.",
    ),
)
