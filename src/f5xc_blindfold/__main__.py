from f5xc_blindfold.cli import main

raise SystemExit(main())
