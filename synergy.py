"""
Synergy detection module for stack analysis.
Finds documented beneficial combinations that are fully present in a selection.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from models import Item


# ===== DATA MODELS =====

@dataclass(frozen=True)
class SynergyRule:
    """
    A documented combination of 2-3 items.
    The rule fires when every id is in the selection.
    """
    ids: Tuple[str, ...]
    name: str
    type: str
    strength: str  # strong, moderate
    evidence_level: str  # strong, moderate, emerging
    description: str
    mechanism: str

    @property
    def id_set(self) -> frozenset:
        return frozenset(self.ids)


@dataclass(frozen=True)
class SynergyMatch:
    """A rule that fired, with display names taken from the selected items"""
    rule: SynergyRule
    item_names: List[str]

    @property
    def name(self) -> str:
        return self.rule.name

    @property
    def strength(self) -> str:
        return self.rule.strength

    @property
    def evidence_level(self) -> str:
        return self.rule.evidence_level


# ===== RULE DEFINITIONS =====

def get_default_rules() -> List[SynergyRule]:
    """
    Returns the built-in synergy rules in evaluation order.
    No two rules share the same id set.
    """
    rules = []

    # ===== ANTIOXIDANT / GLUTATHIONE =====
    rules.append(SynergyRule(
        ids=("nac", "glycine"),
        name="GlyNAC Protocol",
        type="biochemical-synergy",
        strength="strong",
        evidence_level="strong",
        description="NAC provides cysteine and glycine provides the other key substrate for glutathione (GSH) synthesis, the body's master antioxidant. This is the basis of the GlyNAC protocol, which has shown remarkable results in aging studies.",
        mechanism="Glutathione = gamma-glutamyl-cysteinyl-glycine. NAC -> cysteine (rate-limiting). Glycine is the final amino acid. Co-supplementation ensures neither substrate is limiting.",
    ))

    # ===== COFACTORS =====
    rules.append(SynergyRule(
        ids=("vitamin-d3-k2", "magnesium"),
        name="Vitamin D Activation Triad",
        type="cofactor-dependency",
        strength="strong",
        evidence_level="strong",
        description="Magnesium is required for the enzymatic activation of vitamin D, specifically CYP27B1 that converts 25(OH)D to active 1,25(OH)2D. K2 directs calcium mobilized by active vitamin D to bones rather than arteries.",
        mechanism="Mg2+ is a cofactor for CYP27B1 (1-alpha-hydroxylase) and CYP2R1 (25-hydroxylase). K2 activates osteocalcin and matrix GLA protein.",
    ))

    # ===== INHIBITORY TONE =====
    rules.append(SynergyRule(
        ids=("magnesium", "taurine", "glycine"),
        name="GABAergic Convergence",
        type="GABAergic-convergence",
        strength="moderate",
        evidence_level="moderate",
        description="All three converge on inhibitory neurotransmission. Magnesium blocks NMDA receptors and potentiates GABA-A. Taurine activates GABA-A and glycine receptors. Glycine activates inhibitory glycine receptors.",
        mechanism="Mg2+ -> NMDA blockade + GABA-A PAM. Taurine -> GABA-A + GlyR agonism. Glycine -> GlyR agonism. Net: enhanced inhibitory tone.",
    ))
    rules.append(SynergyRule(
        ids=("magnesium", "taurine"),
        name="Dual Inhibitory Support",
        type="GABAergic-synergy",
        strength="moderate",
        evidence_level="moderate",
        description="Magnesium and taurine both enhance inhibitory neurotransmission through complementary mechanisms: NMDA blockade and GABA-A agonism respectively.",
        mechanism="Mg2+ -> NMDA blockade. Taurine -> GABA-A agonism. Combined: reduced neuronal excitability.",
    ))
    rules.append(SynergyRule(
        ids=("magnesium", "glycine"),
        name="Relaxation & Sleep Support",
        type="complementary-mechanisms",
        strength="moderate",
        evidence_level="moderate",
        description="Magnesium promotes relaxation via NMDA antagonism and GABA potentiation. Glycine lowers core body temperature via peripheral vasodilation to accelerate sleep onset.",
        mechanism="Mg2+ -> neural inhibition. Glycine -> thermoregulatory sleep onset. Different endpoints, complementary sleep benefits.",
    ))

    # ===== INFLAMMATION =====
    rules.append(SynergyRule(
        ids=("curcumin", "omega-3"),
        name="Anti-Inflammatory Convergence",
        type="anti-inflammatory-convergence",
        strength="strong",
        evidence_level="strong",
        description="Curcumin inhibits NF-kB and COX-2 (upstream inflammatory switches). Omega-3 fatty acids serve as substrates for specialized pro-resolving mediators (SPMs) that actively resolve inflammation.",
        mechanism="Curcumin -> NF-kB inhibition + COX-2 downregulation. EPA/DHA -> SPM biosynthesis -> active resolution. Combined: suppress + resolve.",
    ))

    # ===== DOPAMINE PRECURSORS =====
    rules.append(SynergyRule(
        ids=("l-tyrosine", "elvanse"),
        name="Dopamine Substrate Replenishment",
        type="substrate-replenishment",
        strength="strong",
        evidence_level="moderate",
        description="Elvanse promotes dopamine release and blocks reuptake, depleting presynaptic stores. L-Tyrosine provides the rate-limiting precursor for dopamine biosynthesis.",
        mechanism="Tyrosine hydroxylase converts L-Tyrosine to L-DOPA -> Dopamine. Amphetamines increase dopamine turnover, making substrate availability rate-limiting.",
    ))
    rules.append(SynergyRule(
        ids=("l-tyrosine", "ritalin"),
        name="Dopamine Precursor Support",
        type="substrate-replenishment",
        strength="moderate",
        evidence_level="moderate",
        description="Ritalin blocks dopamine reuptake, increasing synaptic dopamine. L-Tyrosine ensures adequate dopamine precursor availability to maintain synthesis rates.",
        mechanism="Methylphenidate -> DAT blockade -> increased synaptic DA. Tyrosine -> dopamine synthesis substrate.",
    ))

    # ===== STRESS / MOOD =====
    rules.append(SynergyRule(
        ids=("ashwagandha", "magnesium"),
        name="HPA Axis Modulation",
        type="HPA-axis-modulation",
        strength="moderate",
        evidence_level="moderate",
        description="Ashwagandha reduces cortisol via HPA axis modulation (14-28% reduction). Magnesium independently modulates the HPA axis and reduces stress-related cortisol.",
        mechanism="Ashwagandha withanolides -> hypothalamic-pituitary cortisol modulation. Mg2+ -> normalizes ACTH sensitivity. Combined: multi-level HPA buffering.",
    ))
    rules.append(SynergyRule(
        ids=("myo-inositol", "magnesium"),
        name="Anxiolytic Synergy",
        type="anxiolytic-synergy",
        strength="moderate",
        evidence_level="moderate",
        description="Myo-inositol normalizes serotonin receptor signaling (5-HT2 second messenger). Magnesium reduces neuronal excitability via NMDA blockade. Together they address anxiety from two angles.",
        mechanism="Inositol -> PI/PIP2/IP3 cycle -> 5-HT2 receptor normalization. Mg2+ -> NMDA blockade -> reduced glutamatergic overactivation.",
    ))

    # ===== SLEEP =====
    rules.append(SynergyRule(
        ids=("trazodone", "melatonin"),
        name="Complementary Sleep Mechanisms",
        type="complementary-sleep-mechanisms",
        strength="strong",
        evidence_level="strong",
        description="Melatonin signals sleep onset via the SCN. Trazodone improves sleep maintenance via 5-HT2A antagonism and increases slow-wave sleep. Together they address onset and continuity.",
        mechanism="Melatonin -> MT1/MT2 activation -> circadian phase advance. Trazodone -> 5-HT2A antagonism -> deep sleep enhancement.",
    ))

    # ===== ENERGY METABOLISM =====
    rules.append(SynergyRule(
        ids=("creatine-monohydrate", "magnesium"),
        name="ATP Production Support",
        type="energy-metabolism",
        strength="moderate",
        evidence_level="moderate",
        description="Creatine regenerates ATP via the phosphocreatine system. Magnesium is a cofactor in over 300 ATP-dependent reactions and is required for ATP to be biologically active (Mg-ATP complex).",
        mechanism="Creatine -> PCr -> ATP regeneration. Mg2+ -> ATP cofactor (Mg-ATP complex required for kinase activity).",
    ))
    rules.append(SynergyRule(
        ids=("creatine-monohydrate", "omega-3"),
        name="Neuroprotective Stack",
        type="neuroprotective-synergy",
        strength="moderate",
        evidence_level="emerging",
        description="Creatine supports neuronal ATP regeneration. Omega-3 DHA maintains neuronal membrane fluidity and supports synaptic function. Together they protect neurons from multiple angles.",
        mechanism="Creatine -> brain ATP buffering. DHA -> membrane phospholipid integration -> synaptic health.",
    ))
    rules.append(SynergyRule(
        ids=("berberine", "gn-digestive-enzymes"),
        name="Metabolic Optimization",
        type="metabolic-optimization",
        strength="moderate",
        evidence_level="moderate",
        description="Berberine activates AMPK for glucose uptake but can alter gut motility. Digestive enzymes ensure macronutrient absorption remains efficient despite berberine's GI effects.",
        mechanism="Berberine -> AMPK -> GLUT4 -> glucose clearance. Enzymes -> mechanical nutrient breakdown -> optimal absorption.",
    ))

    # ===== COGNITION =====
    rules.append(SynergyRule(
        ids=("elvanse", "huperzine-a"),
        name="Dual Neurotransmitter Enhancement",
        type="dual-neurotransmitter",
        strength="moderate",
        evidence_level="emerging",
        description="Elvanse enhances dopaminergic/noradrenergic signaling. Huperzine A boosts acetylcholine. This dual approach targets both motivational (DA) and attentional (ACh) cognitive dimensions.",
        mechanism="Dopaminergic (Elvanse) + cholinergic (Huperzine A) = complementary frontal executive + hippocampal memory activation.",
    ))
    rules.append(SynergyRule(
        ids=("coenzyme-q10", "omega-3"),
        name="Mitochondrial & Membrane Support",
        type="cellular-health",
        strength="moderate",
        evidence_level="moderate",
        description="CoQ10 supports mitochondrial electron transport and energy production. Omega-3 maintains cell membrane fluidity and integrity. Together they support cellular health at both the energy and structural level.",
        mechanism="CoQ10 -> ETC Complex I/III -> ATP production. DHA/EPA -> membrane phospholipid integration -> fluidity.",
    ))
    rules.append(SynergyRule(
        ids=("lions-mane", "huperzine-a"),
        name="Cholinergic & Neurotrophic Stack",
        type="cognitive-synergy",
        strength="moderate",
        evidence_level="emerging",
        description="Lion's Mane stimulates NGF (nerve growth factor) production for long-term neuronal health. Huperzine A acutely boosts acetylcholine. Together: acute cognitive enhancement + long-term neuroprotection.",
        mechanism="Lion's Mane hericenones/erinacines -> NGF synthesis -> neuronal growth. Huperzine A -> AChE inhibition -> acute ACh increase.",
    ))
    rules.append(SynergyRule(
        ids=("lions-mane", "omega-3"),
        name="Brain Structure & Growth",
        type="neurotrophic-synergy",
        strength="moderate",
        evidence_level="emerging",
        description="Lion's Mane promotes NGF and neuronal growth. Omega-3 DHA provides the structural building blocks (phospholipids) for new neuronal membranes. Growth factor + building material.",
        mechanism="Lion's Mane -> NGF -> neurogenesis signal. DHA -> phospholipid substrate for new membrane synthesis.",
    ))
    rules.append(SynergyRule(
        ids=("ashwagandha", "l-tyrosine"),
        name="Stress-Resilient Performance",
        type="adaptogenic-synergy",
        strength="moderate",
        evidence_level="moderate",
        description="Ashwagandha reduces cortisol and stress response. L-Tyrosine maintains catecholamine levels under stress. Together: stress resilience + maintained cognitive performance under pressure.",
        mechanism="Ashwagandha -> cortisol reduction via HPA modulation. Tyrosine -> catecholamine availability under stress-induced depletion.",
    ))
    rules.append(SynergyRule(
        ids=("nac", "coenzyme-q10"),
        name="Antioxidant & Mitochondrial Synergy",
        type="cellular-defense",
        strength="moderate",
        evidence_level="moderate",
        description="NAC boosts glutathione (cytoplasmic antioxidant). CoQ10 protects mitochondrial membranes from oxidative damage. Together: comprehensive cellular antioxidant defense at two compartments.",
        mechanism="NAC -> cysteine -> glutathione -> cytoplasmic ROS scavenging. CoQ10 -> mitochondrial membrane antioxidant -> lipid peroxidation prevention.",
    ))
    rules.append(SynergyRule(
        ids=("creatine-monohydrate", "l-tyrosine"),
        name="Cognitive Energy Stack",
        type="cognitive-energy",
        strength="moderate",
        evidence_level="emerging",
        description="Creatine supports brain ATP regeneration for cognitive endurance. L-Tyrosine provides dopamine precursors for sustained attention. Together: energy + neurotransmitter support for mental performance.",
        mechanism="Creatine -> brain PCr -> ATP regeneration under cognitive demand. Tyrosine -> dopamine synthesis -> sustained attentional resources.",
    ))

    return rules


# ===== DETECTION =====

def detect_synergies(
    items: Iterable[Item],
    rules: Optional[List[SynergyRule]] = None
) -> List[SynergyMatch]:
    """
    Find every rule whose ids are all present in the selection.

    Args:
        items: Selected items (already resolved against the catalog)
        rules: Rule table (uses defaults if None)

    Returns:
        Matches in rule declaration order
    """
    if rules is None:
        rules = get_default_rules()

    by_id: Dict[str, Item] = {}
    for item in items:
        by_id.setdefault(item.id, item)
    selected: Set[str] = set(by_id)

    found: List[SynergyMatch] = []
    for rule in rules:
        if not rule.ids or not rule.id_set <= selected:
            continue
        found.append(SynergyMatch(
            rule=rule,
            item_names=[by_id[rule_id].name if rule_id in by_id else rule_id for rule_id in rule.ids],
        ))

    return found


def find_unresolved_rule_ids(
    rules: Iterable[SynergyRule],
    known_ids: Iterable[str]
) -> Dict[str, List[str]]:
    """
    Rule ids that do not exist in the catalog.

    Returns:
        Mapping of rule name -> missing ids (only rules with gaps)
    """
    known = set(known_ids)
    missing: Dict[str, List[str]] = {}
    for rule in rules:
        gaps = [rule_id for rule_id in rule.ids if rule_id not in known]
        if gaps:
            missing[rule.name] = gaps
    return missing
