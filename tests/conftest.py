"""Small in-memory layouts shared by the tests (dbu 0.001 um)."""

import pya
import pytest


def new_layout(dbu=0.001):
    ly = pya.Layout()
    ly.dbu = dbu
    return ly


def add_box(ly, cell, layer, datatype, box):
    cell.shapes(ly.layer(layer, datatype)).insert(pya.Box(*box))


def place(parent, child, x=0, y=0):
    parent.insert(pya.CellInstArray(child.cell_index(), pya.Trans(pya.Vector(x, y))))


@pytest.fixture
def hier_layout():
    """TOP -> A (x2), TOP -> B (3x1 array), A -> B.

    1/0: TOP box 1x2 um, A box 1x1 um (A placed twice)
    2/0: B box 0.5x0.5 um
    """
    ly = new_layout()
    top = ly.create_cell("TOP")
    a = ly.create_cell("A")
    b = ly.create_cell("B")

    add_box(ly, top, 1, 0, (0, 0, 1000, 2000))
    add_box(ly, a, 1, 0, (0, 0, 1000, 1000))
    add_box(ly, b, 2, 0, (0, 0, 500, 500))

    place(top, a, 2000, 0)
    place(top, a, 4000, 0)
    top.insert(pya.CellInstArray(b.cell_index(), pya.Trans(pya.Vector(0, 5000)), pya.Vector(1000, 0), pya.Vector(0, 1000), 3, 1))
    place(a, b, 0, 0)
    return ly


def write_gds(ly, path):
    ly.write(str(path))
    return str(path)
