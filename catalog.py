"""
Curated local data

Purpose: offline lists that feed autocomplete and brand resolution without any network call.

Input: none at runtime.

Output: DRUG_DATABASE (generic name + common dosage/frequency), DRUG_SYNONYMS (brand -> generic),
SUPPLEMENT_DATABASE, COMMON_CONDITIONS, PGX_GENE_GROUPS, PREDEFINED_SUBSTANCES.

Notes: generic names are lower-case English INNs so they line up with the proactive alert rules.
"""
from typing import Dict, List

DRUG_DATABASE: List[Dict[str, str]] = [
    {"name": "acetaminophen", "commonDosage": "500mg", "commonFrequency": "every 8 hours"},
    {"name": "allopurinol", "commonDosage": "100mg", "commonFrequency": "1/day"},
    {"name": "alprazolam", "commonDosage": "0.5mg", "commonFrequency": "2/day"},
    {"name": "amiodarone", "commonDosage": "200mg", "commonFrequency": "1/day"},
    {"name": "amitriptyline", "commonDosage": "25mg", "commonFrequency": "1/day"},
    {"name": "amlodipine", "commonDosage": "5mg", "commonFrequency": "1/day"},
    {"name": "amoxicillin", "commonDosage": "500mg", "commonFrequency": "3/day"},
    {"name": "ampicillin", "commonDosage": "500mg", "commonFrequency": "4/day"},
    {"name": "apixaban", "commonDosage": "5mg", "commonFrequency": "2/day"},
    {"name": "aspirin", "commonDosage": "100mg", "commonFrequency": "1/day"},
    {"name": "atorvastatin", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "azithromycin", "commonDosage": "500mg", "commonFrequency": "1/day"},
    {"name": "bisoprolol", "commonDosage": "5mg", "commonFrequency": "1/day"},
    {"name": "captopril", "commonDosage": "25mg", "commonFrequency": "2/day"},
    {"name": "carbamazepine", "commonDosage": "200mg", "commonFrequency": "2/day"},
    {"name": "celecoxib", "commonDosage": "200mg", "commonFrequency": "1/day"},
    {"name": "cephalexin", "commonDosage": "500mg", "commonFrequency": "4/day"},
    {"name": "ciprofloxacin", "commonDosage": "500mg", "commonFrequency": "2/day"},
    {"name": "citalopram", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "clarithromycin", "commonDosage": "500mg", "commonFrequency": "2/day"},
    {"name": "clopidogrel", "commonDosage": "75mg", "commonFrequency": "1/day"},
    {"name": "codeine", "commonDosage": "30mg", "commonFrequency": "every 6 hours"},
    {"name": "dexketoprofen", "commonDosage": "25mg", "commonFrequency": "every 8 hours"},
    {"name": "diazepam", "commonDosage": "5mg", "commonFrequency": "1/day"},
    {"name": "diclofenac", "commonDosage": "50mg", "commonFrequency": "2/day"},
    {"name": "dicloxacillin", "commonDosage": "500mg", "commonFrequency": "4/day"},
    {"name": "digoxin", "commonDosage": "0.25mg", "commonFrequency": "1/day"},
    {"name": "enalapril", "commonDosage": "10mg", "commonFrequency": "1/day"},
    {"name": "escitalopram", "commonDosage": "10mg", "commonFrequency": "1/day"},
    {"name": "fluconazole", "commonDosage": "150mg", "commonFrequency": "1/week"},
    {"name": "fluoxetine", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "furosemide", "commonDosage": "40mg", "commonFrequency": "1/day"},
    {"name": "gabapentin", "commonDosage": "300mg", "commonFrequency": "3/day"},
    {"name": "haloperidol", "commonDosage": "5mg", "commonFrequency": "2/day"},
    {"name": "hydrochlorothiazide", "commonDosage": "25mg", "commonFrequency": "1/day"},
    {"name": "ibuprofen", "commonDosage": "400mg", "commonFrequency": "every 8 hours"},
    {"name": "insulin glargine", "commonDosage": "10 units", "commonFrequency": "1/day"},
    {"name": "itraconazole", "commonDosage": "200mg", "commonFrequency": "1/day"},
    {"name": "ketorolac", "commonDosage": "10mg", "commonFrequency": "every 6 hours"},
    {"name": "levothyroxine", "commonDosage": "50mcg", "commonFrequency": "1/day"},
    {"name": "lisinopril", "commonDosage": "10mg", "commonFrequency": "1/day"},
    {"name": "lithium", "commonDosage": "300mg", "commonFrequency": "2/day"},
    {"name": "lorazepam", "commonDosage": "1mg", "commonFrequency": "2/day"},
    {"name": "losartan", "commonDosage": "50mg", "commonFrequency": "1/day"},
    {"name": "meloxicam", "commonDosage": "15mg", "commonFrequency": "1/day"},
    {"name": "metformin", "commonDosage": "850mg", "commonFrequency": "2/day"},
    {"name": "methotrexate", "commonDosage": "15mg", "commonFrequency": "1/week"},
    {"name": "metoprolol", "commonDosage": "50mg", "commonFrequency": "2/day"},
    {"name": "naproxen", "commonDosage": "500mg", "commonFrequency": "2/day"},
    {"name": "nitroglycerin", "commonDosage": "0.4mg", "commonFrequency": "as needed"},
    {"name": "omeprazole", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "oxycodone", "commonDosage": "5mg", "commonFrequency": "every 6 hours"},
    {"name": "pantoprazole", "commonDosage": "40mg", "commonFrequency": "1/day"},
    {"name": "paroxetine", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "perindopril", "commonDosage": "4mg", "commonFrequency": "1/day"},
    {"name": "phenelzine", "commonDosage": "15mg", "commonFrequency": "3/day"},
    {"name": "phenytoin", "commonDosage": "100mg", "commonFrequency": "3/day"},
    {"name": "piperacillin", "commonDosage": "4g", "commonFrequency": "every 8 hours"},
    {"name": "prednisone", "commonDosage": "10mg", "commonFrequency": "1/day"},
    {"name": "quetiapine", "commonDosage": "25mg", "commonFrequency": "2/day"},
    {"name": "ramipril", "commonDosage": "5mg", "commonFrequency": "1/day"},
    {"name": "rivaroxaban", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "rosuvastatin", "commonDosage": "10mg", "commonFrequency": "1/day"},
    {"name": "sertraline", "commonDosage": "50mg", "commonFrequency": "1/day"},
    {"name": "sildenafil", "commonDosage": "50mg", "commonFrequency": "as needed"},
    {"name": "simvastatin", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "spironolactone", "commonDosage": "25mg", "commonFrequency": "1/day"},
    {"name": "sulfadiazine", "commonDosage": "1g", "commonFrequency": "4/day"},
    {"name": "sulfamethoxazole/trimethoprim", "commonDosage": "800/160mg", "commonFrequency": "2/day"},
    {"name": "sulfasalazine", "commonDosage": "500mg", "commonFrequency": "2/day"},
    {"name": "tadalafil", "commonDosage": "10mg", "commonFrequency": "as needed"},
    {"name": "tamoxifen", "commonDosage": "20mg", "commonFrequency": "1/day"},
    {"name": "tramadol", "commonDosage": "50mg", "commonFrequency": "every 8 hours"},
    {"name": "valproic acid", "commonDosage": "500mg", "commonFrequency": "2/day"},
    {"name": "vardenafil", "commonDosage": "10mg", "commonFrequency": "as needed"},
    {"name": "verapamil", "commonDosage": "80mg", "commonFrequency": "3/day"},
    {"name": "warfarin", "commonDosage": "5mg", "commonFrequency": "1/day"},
]

# brand (or local-language name) -> generic, all lower-case
DRUG_SYNONYMS: Dict[str, str] = {
    "adiro": "aspirin",
    "tromalyt": "aspirin",
    "ácido acetilsalicílico": "aspirin",
    "acido acetilsalicilico": "aspirin",
    "aspirina": "aspirin",
    "advil": "ibuprofen",
    "motrin": "ibuprofen",
    "espidifen": "ibuprofen",
    "ibuprofeno": "ibuprofen",
    "aleve": "naproxen",
    "naprosyn": "naproxen",
    "naproxeno": "naproxen",
    "voltaren": "diclofenac",
    "voltarén": "diclofenac",
    "diclofenaco": "diclofenac",
    "enantyum": "dexketoprofen",
    "celebrex": "celecoxib",
    "mobic": "meloxicam",
    "toradol": "ketorolac",
    "tylenol": "acetaminophen",
    "paracetamol": "acetaminophen",
    "gelocatil": "acetaminophen",
    "amoxil": "amoxicillin",
    "amoxicilina": "amoxicillin",
    "clamoxyl": "amoxicillin",
    "keflex": "cephalexin",
    "bactrim": "sulfamethoxazole/trimethoprim",
    "septrin": "sulfamethoxazole/trimethoprim",
    "cotrimoxazol": "sulfamethoxazole/trimethoprim",
    "azulfidine": "sulfasalazine",
    "zithromax": "azithromycin",
    "cipro": "ciprofloxacin",
    "sporanox": "itraconazole",
    "diflucan": "fluconazole",
    "viagra": "sildenafil",
    "cialis": "tadalafil",
    "levitra": "vardenafil",
    "nitrostat": "nitroglycerin",
    "nitroglicerina": "nitroglycerin",
    "cafinitrina": "nitroglycerin",
    "zocor": "simvastatin",
    "lipitor": "atorvastatin",
    "cardyl": "atorvastatin",
    "crestor": "rosuvastatin",
    "coumadin": "warfarin",
    "sintrom": "warfarin",
    "eliquis": "apixaban",
    "xarelto": "rivaroxaban",
    "plavix": "clopidogrel",
    "prozac": "fluoxetine",
    "zoloft": "sertraline",
    "besitran": "sertraline",
    "nardil": "phenelzine",
    "lexapro": "escitalopram",
    "cipralex": "escitalopram",
    "paxil": "paroxetine",
    "cordarone": "amiodarone",
    "trangorex": "amiodarone",
    "lanoxin": "digoxin",
    "aldactone": "spironolactone",
    "zestril": "lisinopril",
    "prinivil": "lisinopril",
    "vasotec": "enalapril",
    "renitec": "enalapril",
    "altace": "ramipril",
    "acovil": "ramipril",
    "capoten": "captopril",
    "trexall": "methotrexate",
    "metoject": "methotrexate",
    "glucophage": "metformin",
    "dianben": "metformin",
    "lasix": "furosemide",
    "seguril": "furosemide",
    "synthroid": "levothyroxine",
    "eutirox": "levothyroxine",
    "prilosec": "omeprazole",
    "losec": "omeprazole",
    "norvasc": "amlodipine",
    "lopressor": "metoprolol",
    "neurontin": "gabapentin",
    "xanax": "alprazolam",
    "trankimazin": "alprazolam",
    "valium": "diazepam",
    "ultram": "tramadol",
    "tegretol": "carbamazepine",
    "depakote": "valproic acid",
    "seroquel": "quetiapine",
    "lantus": "insulin glargine",
}

SUPPLEMENT_DATABASE: List[Dict[str, str]] = [
    # Vitamins
    {"name": "Vitamin A", "type": "Vitamin"},
    {"name": "Vitamin B1 (Thiamine)", "type": "Vitamin"},
    {"name": "Vitamin B2 (Riboflavin)", "type": "Vitamin"},
    {"name": "Vitamin B3 (Niacin)", "type": "Vitamin"},
    {"name": "Vitamin B5 (Pantothenic Acid)", "type": "Vitamin"},
    {"name": "Vitamin B6 (Pyridoxine)", "type": "Vitamin"},
    {"name": "Vitamin B7 (Biotin)", "type": "Vitamin"},
    {"name": "Vitamin B9 (Folate/Folic Acid)", "type": "Vitamin"},
    {"name": "Vitamin B12 (Cobalamin)", "type": "Vitamin"},
    {"name": "Vitamin C (Ascorbic Acid)", "type": "Vitamin"},
    {"name": "Vitamin D", "type": "Vitamin"},
    {"name": "Vitamin E", "type": "Vitamin"},
    {"name": "Vitamin K", "type": "Vitamin"},
    # Minerals
    {"name": "Calcium", "type": "Mineral"},
    {"name": "Magnesium", "type": "Mineral"},
    {"name": "Iron", "type": "Mineral"},
    {"name": "Zinc", "type": "Mineral"},
    {"name": "Potassium", "type": "Mineral"},
    {"name": "Selenium", "type": "Mineral"},
    {"name": "Chromium", "type": "Mineral"},
    {"name": "Iodine", "type": "Mineral"},
    {"name": "Copper", "type": "Mineral"},
    {"name": "Manganese", "type": "Mineral"},
    # Herbal
    {"name": "St. John's Wort", "type": "Herbal"},
    {"name": "Ginkgo Biloba", "type": "Herbal"},
    {"name": "Ginseng (Panax)", "type": "Herbal"},
    {"name": "Echinacea", "type": "Herbal"},
    {"name": "Garlic (Allium sativum)", "type": "Herbal"},
    {"name": "Turmeric (Curcumin)", "type": "Herbal"},
    {"name": "Saw Palmetto", "type": "Herbal"},
    {"name": "Valerian Root", "type": "Herbal"},
    {"name": "Milk Thistle", "type": "Herbal"},
    {"name": "Ashwagandha", "type": "Herbal"},
    {"name": "Black Cohosh", "type": "Herbal"},
    {"name": "Feverfew", "type": "Herbal"},
    {"name": "Goldenseal", "type": "Herbal"},
    {"name": "Kava Kava", "type": "Herbal"},
    {"name": "Licorice Root", "type": "Herbal"},
    {"name": "Hawthorn", "type": "Herbal"},
    {"name": "Green Tea Extract", "type": "Herbal"},
    {"name": "Functional Mushrooms (Reishi, Cordyceps, Lion's Mane)", "type": "Herbal"},
    # Amino acids
    {"name": "L-Arginine", "type": "Amino Acid"},
    {"name": "L-Carnitine", "type": "Amino Acid"},
    {"name": "L-Glutamine", "type": "Amino Acid"},
    {"name": "L-Tryptophan", "type": "Amino Acid"},
    {"name": "5-HTP", "type": "Amino Acid"},
    {"name": "N-Acetylcysteine (NAC)", "type": "Amino Acid"},
    {"name": "Collagen", "type": "Amino Acid"},
    # Other
    {"name": "Coenzyme Q10 (CoQ10)", "type": "Other"},
    {"name": "Fish Oil (Omega-3)", "type": "Other"},
    {"name": "Melatonin", "type": "Other"},
    {"name": "Glucosamine", "type": "Other"},
    {"name": "Chondroitin", "type": "Other"},
    {"name": "Probiotics", "type": "Other"},
    {"name": "Creatine", "type": "Other"},
    {"name": "Red Yeast Rice", "type": "Other"},
    {"name": "SAM-e", "type": "Other"},
    {"name": "DHEA", "type": "Other"},
    {"name": "Alpha-Lipoic Acid", "type": "Other"},
]

COMMON_CONDITIONS: List[str] = [
    "Hypertension",
    "Type 2 Diabetes",
    "Type 1 Diabetes",
    "Hypercholesterolemia",
    "Coronary Artery Disease",
    "History of Myocardial Infarction",
    "Heart Failure",
    "Atrial Fibrillation",
    "Chronic Kidney Disease",
    "Renal Impairment",
    "Liver Cirrhosis",
    "Hepatic Impairment",
    "Asthma",
    "COPD",
    "Gastroesophageal Reflux Disease (GERD)",
    "Peptic Ulcer",
    "Hypothyroidism",
    "Hyperthyroidism",
    "Depression",
    "Generalized Anxiety Disorder",
    "Bipolar Disorder",
    "Schizophrenia",
    "Epilepsy",
    "Parkinson's Disease",
    "Alzheimer's Disease",
    "Dementia",
    "Migraine",
    "Osteoarthritis",
    "Rheumatoid Arthritis",
    "Osteoporosis",
    "Gout",
    "Benign Prostatic Hyperplasia",
    "Glaucoma",
    "Angioedema",
    "Pregnancy",
    "Breastfeeding",
    "HIV Infection",
    "Chronic Pain",
    "Insomnia",
    "Obesity",
]

PGX_GENE_GROUPS: Dict[str, List[str]] = {
    "CYP enzymes (drug metabolism)": [
        "CYP1A2", "CYP2B6", "CYP2C8", "CYP2C9", "CYP2C19", "CYP2D6", "CYP3A4", "CYP3A5",
    ],
    "UGT enzymes (drug metabolism)": ["UGT1A1", "UGT1A4", "UGT2B7", "UGT2B15"],
    "Human leukocyte antigens (HLA)": ["HLA-A", "HLA-B"],
    "Drug transporters": ["ABCG2", "SLCO1B1"],
    "Other relevant genes": ["DPYD", "G6PD", "IFNL3", "NUDT15", "TPMT", "VKORC1"],
}

PREDEFINED_SUBSTANCES: Dict[str, List[str]] = {
    "es": [
        "Hierba de San Juan", "Alcohol", "Tabaco", "Zumo de pomelo", "Zumo de arándano",
        "Melatonina", "Omega-3", "Vitamina D", "Magnesio", "Probióticos", "Colágeno",
        "Hongos funcionales",
    ],
    "en": [
        "St. John's Wort", "Alcohol", "Tobacco", "Grapefruit juice", "Cranberry juice",
        "Melatonin", "Omega-3", "Vitamin D", "Magnesium", "Probiotics", "Collagen",
        "Functional mushrooms",
    ],
}


def all_pgx_genes() -> List[str]:
    return [gene for genes in PGX_GENE_GROUPS.values() for gene in genes]


def find_drug(generic_name: str) -> Dict[str, str]:
    """Catalog entry for a generic, or a bare {"name": ...} when unknown."""
    lower = generic_name.lower()
    for entry in DRUG_DATABASE:
        if entry["name"] == lower:
            return entry
    return {"name": generic_name}
