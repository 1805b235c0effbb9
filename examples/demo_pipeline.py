# examples/demo_pipeline.py
from pdt3d.pipeline import compute_delaunay

if __name__ == "__main__":
    # куб + внутрішні точки; 1.0 згорнеться в 0.0
    cube = [
        0, 0, 0,  0.9, 0, 0,  0.9, 0.9, 0,  0, 0.9, 0,
        0, 0, 0.9,  0.9, 0, 0.9,  0.9, 0.9, 0.9,  0, 0.9, 0.9,
        0.5, 0.5, 0.5,  0.2, 0.8, 0.3,  0.8, 0.2, 0.7,
    ]
    n = len(cube) // 3

    tets = compute_delaunay(cube, n, is_periodic=False)
    print("Tets (bounded):", len(tets))

    tets = compute_delaunay(cube, n, is_periodic=True)
    print("Tets (periodic):", len(tets))
