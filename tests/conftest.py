"""Shared fixtures: a small on-disk data set in the catalogue file formats."""

import pytest
import numpy as np

KINEMATICS_HEADER = ("HVS,source_id,x,x_err,y,y_err,z,z_err,"
                     "vx,vx_err,vy,vy_err,vz,vz_err")
COVARIANCE_HEADER = ("index,source_id,xx,xy,xz,xu,xv,xw,yy,yz,yu,yv,yw,"
                     "zz,zu,zv,zw,uu,uv,uw,vv,vw,ww")

STARS = {
    # hvs_id: (source_id, position [kpc], velocity [km/s])
    1: (1001, (20.0, 5.0, 10.0), (300.0, -100.0, 200.0)),
    2: (1002, (-40.0, 12.0, 55.0), (-150.0, 80.0, 400.0)),
}


def kinematics_row(hvs_id, source_id, position, velocity):
    fields = [str(hvs_id), str(source_id)]
    for value in tuple(position) + tuple(velocity):
        fields += [repr(float(value)), "0.5"]
    return ",".join(fields)


def covariance_row(index, source_id, diagonal):
    cov = np.diag(diagonal)
    rows, cols = np.triu_indices(6)
    return ",".join([str(index), str(source_id)] + [repr(float(v)) for v in cov[rows, cols]])


def write_trajectory(path, rows):
    path.write_text("\n".join(" ".join(repr(float(v)) for v in row) for row in rows) + "\n")


@pytest.fixture
def data_root(tmp_path):
    """Directory with kinematics, covariance and one trajectory pair."""
    kin = [KINEMATICS_HEADER]
    cov = [COVARIANCE_HEADER]
    for index, (hvs_id, (source_id, pos, vel)) in enumerate(STARS.items()):
        kin.append(kinematics_row(hvs_id, source_id, pos, vel))
        cov.append(covariance_row(index, source_id,
                                  [0.25, 0.25, 0.25, 100.0, 100.0, 100.0]))
    (tmp_path / "6d_cartesian_data.csv").write_text("\n".join(kin) + "\n")
    (tmp_path / "6d_cartesian_covariance.csv").write_text("\n".join(cov) + "\n")

    folder = tmp_path / "galaxy trajectories" / "trajectory 1"
    folder.mkdir(parents=True)
    # time [Gyr], position [kpc], velocity [km/s]
    write_trajectory(folder / "traj_1_mw.txt", [
        (0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
        (-0.5, 2.0, -1.0, 0.5, -4.0, 2.0, -1.0),
        (-1.0, 4.0, -2.0, 1.0, -4.0, 2.0, -1.0),
    ])
    write_trajectory(folder / "traj_1_lmc.txt", [
        (0.0, -1.0, -41.0, -28.0, -57.0, -226.0, 221.0),
        (-0.5, 30.0, 60.0, -90.0, -20.0, -100.0, 60.0),
        (-1.0, 60.0, 150.0, -150.0, -10.0, -50.0, 30.0),
    ])
    return tmp_path
