"""Mechanism description parser.

Descriptions are XML documents holding ``RobotArm``, ``Positioner`` or
``Track`` elements::

    <Mechanisms>
      <Positioner model="Turntable" manufacturer="Other" payload="500">
        <Base x="0" y="0" z="0" q1="1" q2="0" q3="0" q4="0"/>
        <Joints>
          <Revolute number="7" a="0" d="400" minrange="-360" maxrange="360" maxspeed="90"/>
        </Joints>
      </Positioner>
    </Mechanisms>

Ranges are in degrees (length units for prismatic joints). The mechanism
converts them to working units on construction.
"""

from pathlib import Path
from typing import Callable, List, Optional, TypeVar, Union

from lxml import etree

from jax_mechanisms.core.config import LibraryConfig
from jax_mechanisms.core.exceptions import AssetNotFoundError, ConfigurationError
from jax_mechanisms.core.joint import Joint, JointType, Range
from jax_mechanisms.core.logging import get_logger
from jax_mechanisms.core.mechanism import Manufacturer, Mechanism, MechanismType
from jax_mechanisms.core.mesh import TriangleMesh
from jax_mechanisms.families import create_family
from jax_mechanisms.io.assets import GeometryStore
from jax_mechanisms.transforms.geometry import deg_to_rad, frame_from_quaternion

logger = get_logger(__name__)

T = TypeVar("T")

MECHANISM_TAGS = {kind.value: kind for kind in MechanismType}
JOINT_TAGS = {kind.value: kind for kind in JointType}


def _to_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    raise ValueError(f"not an XML boolean: {text!r}")


def _attribute(element: etree._Element, name: str, convert: Callable[[str], T],
               default: Optional[T] = None) -> T:
    text = element.get(name)
    if text is None:
        if default is not None:
            return default
        raise ConfigurationError(
            f"Missing attribute '{name}' on <{element.tag}>",
            details={"line": element.sourceline},
        )
    try:
        return convert(text.strip())
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid attribute '{name}' on <{element.tag}>: {text!r}",
            details={"line": element.sourceline},
        ) from e


def full_name(element: etree._Element) -> str:
    """Fully qualified name ``{Type}.{Manufacturer}.{model}`` of a mechanism element."""
    return f"{element.tag}.{element.get('manufacturer')}.{element.get('model')}"


def parse_mechanism(element: etree._Element, store: GeometryStore) -> Mechanism:
    """
    Build a Mechanism from its description element.

    Args:
        element: ``RobotArm``, ``Positioner`` or ``Track`` element.
        store: Geometry store providing the model meshes.

    Returns:
        The constructed Mechanism

    Raises:
        ConfigurationError: If the description is malformed or no family matches
        AssetNotFoundError: If the store lacks meshes for the model
    """
    kind = MECHANISM_TAGS.get(element.tag)
    if kind is None:
        raise ConfigurationError(
            f"Unknown mechanism type <{element.tag}>",
            details={"expected": sorted(MECHANISM_TAGS)},
        )

    model = _attribute(element, "model", str)
    manufacturer_name = _attribute(element, "manufacturer", str)
    try:
        manufacturer = Manufacturer(manufacturer_name)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown manufacturer: {manufacturer_name}",
            details={"expected": [m.value for m in Manufacturer]},
        ) from e

    payload = _attribute(element, "payload", float)
    moves_robot = _attribute(element, "movesRobot", _to_bool, default=False)
    family = create_family(kind, manufacturer)

    base_element = element.find("Base")
    if base_element is None:
        raise ConfigurationError(f"Missing <Base> in {full_name(element)}")
    point = [_attribute(base_element, key, float) for key in ("x", "y", "z")]
    quaternion = [_attribute(base_element, key, float) for key in ("q1", "q2", "q3", "q4")]
    base_frame = frame_from_quaternion(point, quaternion)

    joints_element = element.find("Joints")
    if joints_element is None:
        raise ConfigurationError(f"Missing <Joints> in {full_name(element)}")
    joint_elements = [child for child in joints_element if isinstance(child.tag, str)]

    name = full_name(element)
    meshes = store.meshes(name)
    if len(meshes) < len(joint_elements) + 1:
        raise AssetNotFoundError(
            f"Geometry of {name} has {len(meshes)} meshes, expected {len(joint_elements) + 1}",
            model=name,
        )

    joints = [
        _parse_joint(joint_element, index, meshes[index + 1])
        for index, joint_element in enumerate(joint_elements)
    ]

    mechanism = Mechanism(
        model=model,
        manufacturer=manufacturer,
        payload=payload,
        base_frame=base_frame,
        base_mesh=meshes[0].duplicate(),
        joints=joints,
        family=family,
        kind=kind,
        moves_robot=moves_robot,
    )
    logger.info("mechanism_loaded", model=name, joints=len(joints))
    return mechanism


def _parse_joint(element: etree._Element, index: int, mesh: TriangleMesh) -> Joint:
    joint_type = JOINT_TAGS.get(element.tag)
    if joint_type is None:
        raise ConfigurationError(
            f"Unknown joint type <{element.tag}>",
            details={"line": element.sourceline, "expected": sorted(JOINT_TAGS)},
        )

    min_range = _attribute(element, "minrange", float)
    max_range = _attribute(element, "maxrange", float)
    if min_range > max_range:
        raise ConfigurationError(
            f"Empty range on joint {index}: [{min_range}, {max_range}]",
            details={"line": element.sourceline},
        )

    max_speed = _attribute(element, "maxspeed", float)
    if joint_type is JointType.REVOLUTE:
        max_speed = float(deg_to_rad(max_speed))

    return Joint(
        index=index,
        number=_attribute(element, "number", int) - 1,
        joint_type=joint_type,
        a=_attribute(element, "a", float),
        d=_attribute(element, "d", float),
        range=Range(min_range, max_range),
        max_speed=max_speed,
        local_mesh=mesh.duplicate(),
    )


def _parse_document(path: Union[str, Path]) -> etree._Element:
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Mechanism description not found: {path}")
    try:
        return etree.parse(str(path)).getroot()
    except etree.XMLSyntaxError as e:
        raise ConfigurationError(
            f"Malformed mechanism description: {path}",
            details={"error": str(e)},
        ) from e


def _mechanism_elements(root: etree._Element) -> List[etree._Element]:
    if root.tag in MECHANISM_TAGS:
        return [root]
    return [element for element in root.iter(*MECHANISM_TAGS)]


def list_mechanisms(path: Union[str, Path]) -> List[str]:
    """Fully qualified names of the mechanisms described in an XML file."""
    return [full_name(element) for element in _mechanism_elements(_parse_document(path))]


def load_mechanism(name: str, config: LibraryConfig, store: Optional[GeometryStore] = None) -> Mechanism:
    """
    Load a mechanism by its fully qualified name from a library.

    Args:
        name: ``{Type}.{Manufacturer}.{model}``, e.g. ``Track.Other.Rail6m``.
        config: Library to read the description and meshes from.
        store: Geometry store to reuse. When omitted a new store is created
            from ``config`` for this call only, so its mesh cache is not
            shared; pass one store to load several mechanisms.

    Raises:
        ConfigurationError: If the name is not described or the description is invalid
        AssetNotFoundError: If the meshes of the model are missing
    """
    root = _parse_document(config.description_path)
    elements = _mechanism_elements(root)
    for element in elements:
        if full_name(element) == name:
            return parse_mechanism(element, store or GeometryStore(config))

    raise ConfigurationError(
        f"Mechanism not described in library: {name}",
        details={"available": [full_name(e) for e in elements]},
    )
